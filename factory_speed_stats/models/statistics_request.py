from typing import Optional

from pydantic import BaseModel


class StatisticsRequest(BaseModel):
    request_id: Optional[str] = None
    device_id: Optional[str] = None
