import logging
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, MongoClient
from pymongo.database import Database

from factory_speed_stats.core.config import Settings
from factory_speed_stats.models.log_query import LogQueryFilters

logger = logging.getLogger(__name__)

SPEED_MESSAGE_PATTERN = "^[0-9]+$"

LOG_QUERY_PROJECTION = {
    "_id": 1,
    "device_id": 1,
    "device_name": 1,
    "log_level": 1,
    "log_code": 1,
    "severity": 1,
    "message": 1,
    "location": 1,
    "timestamp": 1,
}


class SpeedLogStore:
    """Read-only access to the device and log collections.

    Every query that touches speed samples uses the same predicate:
    ``log_code`` equal to the speed code and a message made of digits only.
    """

    def __init__(
        self,
        database: Database,
        logs_collection: str = "logs_all",
        devices_collection: str = "devices",
        log_code: str = "SPD",
        client: Optional[MongoClient] = None,
    ):
        self.database = database
        self.logs = database[logs_collection]
        self.devices = database[devices_collection]
        self.log_code = log_code
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SpeedLogStore":
        client = MongoClient(settings.MONGO_URI)
        logger.info(f"Connecting to MongoDB at {settings.MONGO_URI}")
        return cls(
            client[settings.MONGO_DB_NAME],
            logs_collection=settings.ALL_LOGS_COLLECTION,
            devices_collection=settings.DEVICES_COLLECTION,
            log_code=settings.SPEED_LOG_CODE,
            client=client,
        )

    def speed_filter(self, device_id: Optional[str] = None) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if device_id is not None:
            query["device_id"] = device_id
        query["log_code"] = self.log_code
        query["message"] = {"$regex": SPEED_MESSAGE_PATTERN}
        return query

    def distinct_speed_devices(self) -> List[str]:
        return self.logs.distinct("device_id", self.speed_filter())

    def find_device(self, device_id: str) -> Optional[Dict[str, Any]]:
        return self.devices.find_one({"_id": device_id})

    def aggregate_speed(self, device_id: str) -> Optional[Dict[str, Any]]:
        """Average and count of the device's speed samples.

        Messages are converted with ``$toDouble`` so the mean keeps its
        fractional part until the caller rounds it.
        """
        pipeline = [
            {"$match": self.speed_filter(device_id)},
            {"$addFields": {"speed_value": {"$toDouble": "$message"}}},
            {
                "$group": {
                    "_id": None,
                    "average": {"$avg": "$speed_value"},
                    "count": {"$sum": 1},
                }
            },
        ]
        results = list(self.logs.aggregate(pipeline))
        return results[0] if results else None

    def latest_speed_log(self, device_id: str) -> Optional[Dict[str, Any]]:
        cursor = (
            self.logs.find(self.speed_filter(device_id))
            .sort("timestamp", DESCENDING)
            .limit(1)
        )
        for doc in cursor:
            return doc
        return None

    def find_logs(self, filters: LogQueryFilters, limit: int) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        for field in ("device_id", "log_level", "log_code", "severity"):
            value = getattr(filters, field)
            if value:
                query[field] = value
        # a time range only filters when both bounds are given
        time_range = filters.time_range
        if time_range is not None and time_range.start is not None and time_range.end is not None:
            query["timestamp"] = {
                "$gte": time_range.start,
                "$lte": time_range.end,
            }

        logger.debug(f"Log query {query} (limit {limit})")
        cursor = (
            self.logs.find(query, LOG_QUERY_PROJECTION)
            .sort("timestamp", DESCENDING)
            .limit(limit)
        )
        return list(cursor)

    def close(self):
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB client closed")
