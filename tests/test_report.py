"""Tests for the printed speed report."""

from __future__ import annotations

import io

from factory_speed_stats.models.device_speed_report import DeviceSpeedReport
from factory_speed_stats.report import format_report, print_report


def test_format_report_with_devices() -> None:
    reports = [
        DeviceSpeedReport(
            device_id="A", device_name="Sensor1", average_speed=15, sample_count=2, current_speed=20
        ),
        DeviceSpeedReport(
            device_id="C", device_name="unknown", average_speed=5, sample_count=1, current_speed=5
        ),
    ]
    assert format_report(reports) == [
        "===== Speed statistics per device =====",
        "2 devices found",
        "",
        "Device: A (Sensor1)",
        "  - Average speed: 15 (2 logs total)",
        "  - Current speed: 20",
        "",
        "Device: C (unknown)",
        "  - Average speed: 5 (1 logs total)",
        "  - Current speed: 5",
        "",
        "==========================",
    ]


def test_format_report_without_devices() -> None:
    assert format_report([]) == [
        "===== Speed statistics per device =====",
        "0 devices found",
        "",
        "==========================",
    ]


def test_print_report_writes_lines() -> None:
    out = io.StringIO()
    print_report([], file=out)
    assert out.getvalue() == (
        "===== Speed statistics per device =====\n"
        "0 devices found\n"
        "\n"
        "==========================\n"
    )


def test_print_report_defaults_to_stdout(capsys) -> None:
    print_report([])
    assert capsys.readouterr().out.splitlines()[1] == "0 devices found"
