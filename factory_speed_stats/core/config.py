from typing import Annotated, Any, Optional

from pydantic import BeforeValidator
from pydantic_settings import BaseSettings, SettingsConfigDict


def log_code_parse(v: Any) -> str:
    if isinstance(v, str):
        return v.strip().upper()
    raise ValueError(v)


def log_level_parse(v: Any) -> str:
    if isinstance(v, str):
        return v.strip().upper()
    elif isinstance(v, int):
        return {10: "DEBUG", 20: "INFO", 30: "WARNING", 40: "ERROR", 50: "CRITICAL"}.get(
            v, "INFO"
        )
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"), env_ignore_empty=True, extra="ignore"
    )

    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "factory_monitoring"
    DEVICES_COLLECTION: str = "devices"
    ALL_LOGS_COLLECTION: str = "logs_all"

    # Speed report
    SPEED_LOG_CODE: Annotated[str, BeforeValidator(log_code_parse)] = "SPD"
    UNKNOWN_DEVICE_NAME: str = "unknown"

    # MQTT
    MQTT_ENABLED: bool = True
    MQTT_HOST: str = "localhost"
    MQTT_PORT: int = 1883
    MQTT_USERNAME: Optional[str] = None
    MQTT_PASSWORD: Optional[str] = None
    MQTT_CLIENT_ID_PREFIX: str = "factory_monitor_speed_stats_"

    # MQTT topics
    STATISTICS_REQUEST_TOPIC: str = "factory/statistics"
    STATISTICS_RESPONSE_TOPIC: str = "factory/statistics/response"
    QUERY_REQUEST_TOPIC: str = "factory/query/logs/request"
    QUERY_RESPONSE_TOPIC: str = "factory/query/logs/response"
    LOG_QUERY_DEFAULT_LIMIT: int = 100

    # Logging
    LOG_LEVEL: Annotated[str, BeforeValidator(log_level_parse)] = "INFO"
    LOG_FILE: Optional[str] = None


settings = Settings()
