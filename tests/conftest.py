"""Pytest configuration and shared fixtures for the speed statistics tests.

The project root is placed on ``sys.path`` so ``factory_speed_stats`` imports
without an editable install. ``FakeSpeedLogStore`` answers the same read
methods as ``SpeedLogStore`` from plain Python lists.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest


def _ensure_project_root_on_path() -> None:
    root = Path(__file__).resolve().parents[1]
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)


_ensure_project_root_on_path()

SPEED_PATTERN = re.compile("^[0-9]+$")


class FakeSpeedLogStore:
    def __init__(self, logs: List[Dict[str, Any]], devices: Optional[Dict[str, str]] = None):
        self.logs = logs
        self.devices = {
            device_id: {"_id": device_id, "device_name": name}
            for device_id, name in (devices or {}).items()
        }
        self.calls: List[str] = []

    def _samples(self, device_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            log
            for log in self.logs
            if log["log_code"] == "SPD"
            and SPEED_PATTERN.match(log["message"])
            and (device_id is None or log["device_id"] == device_id)
        ]

    def distinct_speed_devices(self) -> List[str]:
        self.calls.append("distinct")
        seen: List[str] = []
        for log in self._samples():
            if log["device_id"] not in seen:
                seen.append(log["device_id"])
        return seen

    def find_device(self, device_id: str) -> Optional[Dict[str, Any]]:
        self.calls.append(f"device:{device_id}")
        return self.devices.get(device_id)

    def aggregate_speed(self, device_id: str) -> Optional[Dict[str, Any]]:
        self.calls.append(f"aggregate:{device_id}")
        values = [float(log["message"]) for log in self._samples(device_id)]
        if not values:
            return None
        return {"_id": None, "average": sum(values) / len(values), "count": len(values)}

    def latest_speed_log(self, device_id: str) -> Optional[Dict[str, Any]]:
        self.calls.append(f"latest:{device_id}")
        samples = sorted(self._samples(device_id), key=lambda log: log["timestamp"], reverse=True)
        return samples[0] if samples else None

    def find_logs(self, filters, limit: int) -> List[Dict[str, Any]]:
        self.calls.append(f"find_logs:{limit}")
        matched = [
            log
            for log in self.logs
            if filters.device_id is None or log["device_id"] == filters.device_id
        ]
        matched.sort(key=lambda log: log["timestamp"], reverse=True)
        return matched[:limit]

    def close(self) -> None:
        self.calls.append("close")


def speed_log(device_id: str, message: str, timestamp: int, log_code: str = "SPD") -> Dict[str, Any]:
    return {
        "device_id": device_id,
        "log_code": log_code,
        "message": message,
        "timestamp": timestamp,
    }


@pytest.fixture
def sensor_store() -> FakeSpeedLogStore:
    return FakeSpeedLogStore(
        [
            speed_log("A", "10", 1),
            speed_log("A", "20", 2),
            speed_log("C", "5", 1),
            speed_log("B", "abc", 1),
            speed_log("D", "5", 1, log_code="TMP"),
        ],
        devices={"A": "Sensor1"},
    )
