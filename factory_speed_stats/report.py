import sys
from typing import List, Optional, Sequence, TextIO

from factory_speed_stats.models.device_speed_report import DeviceSpeedReport

REPORT_HEADER = "===== Speed statistics per device ====="
REPORT_FOOTER = "=========================="


def format_device_block(report: DeviceSpeedReport) -> List[str]:
    return [
        f"Device: {report.device_id} ({report.device_name})",
        f"  - Average speed: {report.average_speed} ({report.sample_count} logs total)",
        f"  - Current speed: {report.current_speed}",
        "",
    ]


def format_report(reports: Sequence[DeviceSpeedReport]) -> List[str]:
    lines = [REPORT_HEADER, f"{len(reports)} devices found", ""]
    for report in reports:
        lines.extend(format_device_block(report))
    lines.append(REPORT_FOOTER)
    return lines


def print_report(reports: Sequence[DeviceSpeedReport], file: Optional[TextIO] = None) -> None:
    out = file or sys.stdout
    for line in format_report(reports):
        print(line, file=out)
