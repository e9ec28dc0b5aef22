import logging
import sys

from pymongo.errors import PyMongoError

from factory_speed_stats.core.config import settings
from factory_speed_stats.core.logging_config import setup_logging
from factory_speed_stats.db.services import SpeedLogStore
from factory_speed_stats.report import print_report
from factory_speed_stats.stats import SpeedStatsError, build_speed_reports

logger = logging.getLogger(__name__)


def run(store) -> None:
    reports = build_speed_reports(store, placeholder=settings.UNKNOWN_DEVICE_NAME)
    print_report(reports)


def main() -> int:
    setup_logging()
    store = SpeedLogStore.from_settings(settings)
    try:
        run(store)
    except PyMongoError as e:
        logger.error(f"MongoDB query failed: {e}")
        return 1
    except SpeedStatsError as e:
        logger.error(f"Speed report failed: {e}")
        return 1
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
