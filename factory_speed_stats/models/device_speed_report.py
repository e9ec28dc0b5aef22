from pydantic import BaseModel


class DeviceSpeedReport(BaseModel):
    device_id: str
    device_name: str
    average_speed: int
    sample_count: int
    current_speed: int
