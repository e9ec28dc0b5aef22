from typing import List

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pymongo.errors import PyMongoError

from factory_speed_stats.core.config import settings
from factory_speed_stats.models.device_speed_report import DeviceSpeedReport
from factory_speed_stats.report import format_report
from factory_speed_stats.stats import (
    SpeedStatsError,
    build_device_report,
    build_speed_reports,
)

speed_router = APIRouter()


def _reports(request: Request) -> List[DeviceSpeedReport]:
    try:
        return build_speed_reports(
            request.app.state.store, placeholder=settings.UNKNOWN_DEVICE_NAME
        )
    except PyMongoError as e:
        raise HTTPException(status_code=503, detail=f"Log store unavailable: {e}")
    except SpeedStatsError as e:
        raise HTTPException(status_code=500, detail=str(e))


@speed_router.get("/speeds", response_model=List[DeviceSpeedReport])
def get_speeds(request: Request):
    return _reports(request)


@speed_router.get("/reports/speeds", response_class=PlainTextResponse)
def get_speed_report(request: Request):
    return "\n".join(format_report(_reports(request))) + "\n"


@speed_router.get("/speeds/{device_id}", response_model=DeviceSpeedReport)
def get_device_speed(device_id: str, request: Request):
    try:
        report = build_device_report(
            request.app.state.store, device_id, settings.UNKNOWN_DEVICE_NAME
        )
    except PyMongoError as e:
        raise HTTPException(status_code=503, detail=f"Log store unavailable: {e}")
    except SpeedStatsError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if report.sample_count == 0:
        raise HTTPException(
            status_code=404, detail=f"No speed samples found for device {device_id}."
        )
    return report
