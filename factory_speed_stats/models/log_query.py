from typing import Optional

from pydantic import BaseModel


class TimeRange(BaseModel):
    start: Optional[int] = None
    end: Optional[int] = None


class LogQueryFilters(BaseModel):
    device_id: Optional[str] = None
    log_level: Optional[str] = None
    log_code: Optional[str] = None
    severity: Optional[str] = None
    time_range: Optional[TimeRange] = None
    limit: Optional[int] = None


class LogQuery(BaseModel):
    query_id: str = ""
    query_type: str = ""
    filters: LogQueryFilters = LogQueryFilters()
