import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from factory_speed_stats.core.config import settings
from factory_speed_stats.core.logging_config import setup_logging
from factory_speed_stats.db.services import SpeedLogStore
from factory_speed_stats.mqtt_services import StatisticsMQTTManager
from factory_speed_stats.router import speed_router

logger = logging.getLogger(__name__)


def create_app(store=None, enable_mqtt: Optional[bool] = None) -> FastAPI:
    if enable_mqtt is None:
        enable_mqtt = settings.MQTT_ENABLED

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_store = store is None
        if owns_store:
            setup_logging()
        app.state.store = SpeedLogStore.from_settings(settings) if owns_store else store

        mqtt_manager = None
        try:
            if enable_mqtt:
                mqtt_manager = StatisticsMQTTManager(app.state.store)
                mqtt_manager.initialize_mqtt(
                    host=settings.MQTT_HOST,
                    port=settings.MQTT_PORT,
                    username=settings.MQTT_USERNAME,
                    password=settings.MQTT_PASSWORD,
                )
                mqtt_manager.start()
                logger.info("MQTT statistics responder started")

            yield
        finally:
            try:
                if mqtt_manager:
                    mqtt_manager.stop()
            finally:
                if owns_store:
                    app.state.store.close()

    app = FastAPI(lifespan=lifespan)
    app.include_router(speed_router, tags=["Speed statistics"])

    @app.get("/")
    async def root():
        return {"message": "Speed statistics service is running"}

    return app


app = create_app()
