import json
import logging
import time
from typing import Any, Dict, Optional

import paho.mqtt.client as mqtt
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from factory_speed_stats.core.config import Settings, settings
from factory_speed_stats.models.log_query import LogQuery
from factory_speed_stats.models.statistics_request import StatisticsRequest
from factory_speed_stats.stats import (
    SpeedStatsError,
    build_device_report,
    build_speed_reports,
)

logger = logging.getLogger(__name__)


class StatisticsMQTTManager:
    """Answers speed statistics and log query requests over MQTT."""

    def __init__(self, store, config: Settings = settings):
        self.store = store
        self.config = config
        self.mqtt_client: Optional[mqtt.Client] = None

    def initialize_mqtt(
        self,
        host: str,
        port: int,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        client_id = f"{self.config.MQTT_CLIENT_ID_PREFIX}{int(time.time() * 1000)}"
        self.mqtt_client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        self.mqtt_client.on_connect = self.on_connect
        self.mqtt_client.on_message = self.on_message
        if username:
            self.mqtt_client.username_pw_set(username=username, password=password)
        self.mqtt_client.reconnect_delay_set(min_delay=2, max_delay=30)
        logger.info(f"Connecting to MQTT broker at {host}:{port}")
        self.mqtt_client.connect(host, port)

    def start(self):
        self.mqtt_client.loop_start()

    def stop(self):
        if self.mqtt_client:
            self.mqtt_client.loop_stop()
            self.mqtt_client.disconnect()
            logger.info("MQTT client disconnected")

    def on_connect(self, client, userdata, flags, reason_code, properties=None):  # noqa: ARG002
        logger.info(f"Connected with result code {reason_code}")
        client.subscribe(self.config.STATISTICS_REQUEST_TOPIC, qos=1)
        client.subscribe(self.config.QUERY_REQUEST_TOPIC, qos=1)
        logger.info(
            f"Subscribed to {self.config.STATISTICS_REQUEST_TOPIC}, "
            f"{self.config.QUERY_REQUEST_TOPIC}"
        )

    def on_message(self, client, userdata, msg):  # noqa: ARG002
        topic = msg.topic
        try:
            data = json.loads(msg.payload.decode("UTF-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Invalid JSON on topic {topic}: {e}")
            return

        if topic == self.config.STATISTICS_REQUEST_TOPIC:
            response = self.handle_statistics_request(data)
            self.publish(self.config.STATISTICS_RESPONSE_TOPIC, response)
        elif topic == self.config.QUERY_REQUEST_TOPIC:
            response = self.handle_log_query(data)
            self.publish(self.config.QUERY_RESPONSE_TOPIC, response)

    def publish(self, topic: str, payload: Dict[str, Any]):
        self.mqtt_client.publish(topic, json.dumps(payload, default=str), qos=1)

    def handle_statistics_request(self, data: Any) -> Dict[str, Any]:
        request_id = data.get("request_id") if isinstance(data, dict) else None
        try:
            request = StatisticsRequest.model_validate(data)
            logger.info(
                f"Processing statistics request for: {request.device_id or 'all devices'}"
            )
            if request.device_id:
                reports = [
                    build_device_report(
                        self.store, request.device_id, self.config.UNKNOWN_DEVICE_NAME
                    )
                ]
            else:
                reports = build_speed_reports(
                    self.store, placeholder=self.config.UNKNOWN_DEVICE_NAME
                )
        except (ValidationError, SpeedStatsError, PyMongoError) as e:
            logger.error(f"Error processing statistics request: {e}")
            return {"request_id": request_id, "status": "error", "error": str(e)}
        except Exception as e:
            # on_message runs on the paho network thread; nothing may escape it
            logger.exception(f"Unexpected error processing statistics request: {e}")
            return {"request_id": request_id, "status": "error", "error": str(e)}

        return {
            "request_id": request.request_id,
            "status": "success",
            "count": len(reports),
            "data": [report.model_dump() for report in reports],
        }

    def handle_log_query(self, data: Any) -> Dict[str, Any]:
        query_id = data.get("query_id", "") if isinstance(data, dict) else ""
        try:
            query = LogQuery.model_validate(data)
        except ValidationError as e:
            logger.error(f"Invalid log query {query_id}: {e}")
            return {"query_id": query_id, "status": "error", "error": str(e)}

        if query.query_type != "logs":
            return {
                "query_id": query.query_id,
                "status": "error",
                "error": "Unsupported query type",
            }

        limit = query.filters.limit or self.config.LOG_QUERY_DEFAULT_LIMIT
        try:
            logs = self.store.find_logs(query.filters, limit)
        except PyMongoError as e:
            logger.error(f"Error processing query {query.query_id}: {e}")
            return {"query_id": query.query_id, "status": "error", "error": str(e)}
        except Exception as e:
            logger.exception(f"Unexpected error processing query {query.query_id}: {e}")
            return {"query_id": query.query_id, "status": "error", "error": str(e)}

        logger.info(f"Query processed: {query.query_id} ({len(logs)} results)")
        return {
            "query_id": query.query_id,
            "status": "success",
            "count": len(logs),
            "data": logs,
        }


if __name__ == "__main__":
    from factory_speed_stats.core.logging_config import setup_logging
    from factory_speed_stats.db.services import SpeedLogStore

    setup_logging()
    manager = StatisticsMQTTManager(SpeedLogStore.from_settings(settings))
    manager.initialize_mqtt(
        host=settings.MQTT_HOST,
        port=settings.MQTT_PORT,
        username=settings.MQTT_USERNAME,
        password=settings.MQTT_PASSWORD,
    )
    try:
        manager.mqtt_client.loop_forever()
    finally:
        manager.store.close()
