import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

import pandas as pd

from .config import USAGE_POINT_ID
from .format import format_as_statistics, format_daily_data, format_load_curve
from .geredis_api import GeredisError, Session

logger = logging.getLogger(__name__)

LOAD_CURVE_DAYS = 90
DAILY_LOOPS = 2
DAILY_WINDOW_DAYS = (365 - 7) // DAILY_LOOPS

# Error descriptions the API returns once there is no older history to serve.
END_OF_HISTORY_MESSAGES = (
    "The requested period cannot be anterior to the meter's last activation date",
    "The start date must be greater than the history deadline.",
    "no measure found for this usage point",
)


def today() -> date:
    return date.today()


def as_day(value) -> date:
    """Calendar day of a date, datetime or timestamp."""
    return pd.Timestamp(value).date()


def is_before(day, limit) -> bool:
    """True when ``day`` falls on or before ``limit`` (False without a limit)."""
    return limit is not None and as_day(day) <= as_day(limit)


def _is_end_of_history(error: Exception) -> bool:
    return isinstance(error, GeredisError) and error.error_description in END_OF_HISTORY_MESSAGES


class LinkyGeredisClient:
    def __init__(self, user: str, password: str, session: Optional[Session] = None):
        self.user = user
        self.password = password
        self.session = session or Session(user, password, usage_point_id=USAGE_POINT_ID)

    def get_energy_data(self, first_day=None) -> List[Dict]:
        """Fetch up to a year of consumption, newest window first, and return it as statistics.

        One load-curve request covers the last 90 days, then up to two
        daily-consumption requests walk further back. Pagination stops at
        ``first_day`` when given, or when the API reports no older history.
        Remote failures are logged and end the current phase; this method
        does not raise them.
        """
        history: List[List[Dict]] = []
        offset = 0
        limit_reached = False
        keyword = "consumption"
        now = today()
        limit = as_day(first_day) if first_day is not None else None

        from_date = now - timedelta(days=offset + LOAD_CURVE_DAYS)
        if is_before(from_date, limit):
            from_date = limit
            limit_reached = True
        start = from_date.strftime("%Y-%m-%d")
        end = (now - timedelta(days=offset)).strftime("%Y-%m-%d")

        try:
            load_curve = self.session.get_load_curve(start, end)
            history.insert(0, format_load_curve(load_curve["interval_reading"]))
            logger.debug("Successfully retrieved %s load curve from %s to %s", keyword, start, end)
            offset += LOAD_CURVE_DAYS
        except Exception as e:
            logger.debug("Cannot fetch %s load curve from %s to %s, here is the error:", keyword, start, end)
            logger.warning(e)

        for _ in range(DAILY_LOOPS):
            if limit_reached:
                break
            from_date = now - timedelta(days=offset + DAILY_WINDOW_DAYS)
            if is_before(from_date, limit):
                from_date = limit
                limit_reached = True
            start = from_date.strftime("%Y-%m-%d")
            end = (now - timedelta(days=offset)).strftime("%Y-%m-%d")

            try:
                daily_data = self.session.get_daily_consumption(start, end)
                history.insert(0, format_daily_data(daily_data["interval_reading"]))
                logger.debug("Successfully retrieved daily %s data from %s to %s", keyword, start, end)
                offset += DAILY_WINDOW_DAYS
            except Exception as e:
                if first_day is None and _is_end_of_history(e):
                    logger.info("All available %s data has been imported", keyword)
                    break
                logger.debug("Cannot fetch daily %s data from %s to %s, here is the error:", keyword, start, end)
                logger.warning(e)
                break

        data_points = [point for batch in history for point in batch]

        if not data_points:
            logger.warning("Data import returned nothing !")
        else:
            interval_from = pd.Timestamp(data_points[0]["date"]).strftime("%d/%m/%Y")
            interval_to = pd.Timestamp(data_points[-1]["date"]).strftime("%d/%m/%Y")
            logger.info(
                "Data import returned %d data points from %s to %s", len(data_points), interval_from, interval_to
            )

        return format_as_statistics(data_points)
