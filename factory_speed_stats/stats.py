"""
Per-device speed statistics computed from the speed log store.

A store is any object with the read methods of
``factory_speed_stats.db.services.SpeedLogStore``: ``distinct_speed_devices``,
``find_device``, ``aggregate_speed`` and ``latest_speed_log``.
"""
import logging
import math
import re
from typing import List, NamedTuple, Optional, Tuple

from factory_speed_stats.db.services import SPEED_MESSAGE_PATTERN
from factory_speed_stats.models.device_speed_report import DeviceSpeedReport

logger = logging.getLogger(__name__)

# Signed 64-bit range, the widest integer the log store keeps natively.
MAX_SPEED_VALUE = 2**63 - 1

UNKNOWN_DEVICE_NAME = "unknown"

_speed_message = re.compile(SPEED_MESSAGE_PATTERN)


class SpeedStatsError(Exception):
    pass


class SpeedParseError(SpeedStatsError, ValueError):
    def __init__(self, message: str, reason: str):
        super().__init__(f"{reason}: {message!r}")
        self.message = message
        self.reason = reason


class MalformedSpeedError(SpeedParseError):
    def __init__(self, message: str):
        super().__init__(message, "Speed message is not a non-negative integer")


class SpeedOverflowError(SpeedParseError):
    def __init__(self, message: str):
        super().__init__(message, "Speed value exceeds the 64-bit integer range")


class ParsedSpeed(NamedTuple):
    value: Optional[int]
    error: Optional[SpeedParseError]

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> int:
        if self.error is not None:
            raise self.error
        return self.value


def parse_speed(message) -> ParsedSpeed:
    """Parse a speed log message as an integer.

    Uses the same pattern as the store query, so a message the store
    selected only fails here when it is out of range.
    """
    if not isinstance(message, str) or not _speed_message.match(message):
        return ParsedSpeed(None, MalformedSpeedError(str(message)))
    value = int(message)
    if value > MAX_SPEED_VALUE:
        return ParsedSpeed(None, SpeedOverflowError(message))
    return ParsedSpeed(value, None)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def discover_devices(store) -> List[str]:
    devices = store.distinct_speed_devices()
    logger.debug(f"Discovered {len(devices)} devices with speed samples")
    return devices


def resolve_device_name(
    store, device_id: str, placeholder: str = UNKNOWN_DEVICE_NAME
) -> str:
    device = store.find_device(device_id)
    if device is None:
        logger.debug(f"Device '{device_id}' not found, using '{placeholder}'")
        return placeholder
    return device.get("device_name") or placeholder


def average_speed(store, device_id: str) -> Tuple[int, int]:
    """Return ``(rounded average, sample count)`` for a device.

    The store parses messages as floating point before averaging, unlike
    ``current_speed`` which parses the latest message as an integer.
    """
    result = store.aggregate_speed(device_id)
    if not result or result.get("count", 0) == 0:
        logger.debug(f"No speed samples to average for device '{device_id}'")
        return 0, 0

    average = float(result["average"])
    if not math.isfinite(average) or abs(average) > MAX_SPEED_VALUE:
        raise SpeedOverflowError(str(result["average"]))
    return round_half_up(average), int(result["count"])


def current_speed(store, device_id: str) -> int:
    latest = store.latest_speed_log(device_id)
    if latest is None:
        logger.debug(f"No latest speed sample for device '{device_id}'")
        return 0
    return parse_speed(latest.get("message")).unwrap()


def build_device_report(
    store, device_id: str, placeholder: str = UNKNOWN_DEVICE_NAME
) -> DeviceSpeedReport:
    device_name = resolve_device_name(store, device_id, placeholder)
    average, count = average_speed(store, device_id)
    current = current_speed(store, device_id)
    return DeviceSpeedReport(
        device_id=str(device_id),
        device_name=device_name,
        average_speed=average,
        sample_count=count,
        current_speed=current,
    )


def build_speed_reports(
    store, placeholder: str = UNKNOWN_DEVICE_NAME
) -> List[DeviceSpeedReport]:
    """Build one report per discovered device, in discovery order."""
    return [
        build_device_report(store, device_id, placeholder)
        for device_id in discover_devices(store)
    ]
