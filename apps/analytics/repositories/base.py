# apps/analytics/repositories/base.py
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from decimal import Decimal
from typing import Dict, List, Any, Iterable, Optional

from django.utils import timezone

from apps.analytics.models import DAILY_HOUR

ZERO = Decimal('0.00')


def stored_hour(hour):
    """Snapshot hour column value; the daily row is stored under DAILY_HOUR"""
    return DAILY_HOUR if hour is None else hour


def window_bounds(start=None, end=None):
    """Normalise an optional visited_at window to aware datetimes.

    Bare dates cover the whole day, so ``end=date(2025, 1, 31)`` includes
    visits made at 23:59 on the 31st.
    """
    if isinstance(start, date) and not isinstance(start, datetime):
        start = datetime.combine(start, time.min)
    if isinstance(end, date) and not isinstance(end, datetime):
        end = datetime.combine(end, time.max)
    if start is not None and timezone.is_naive(start):
        start = timezone.make_aware(start)
    if end is not None and timezone.is_naive(end):
        end = timezone.make_aware(end)
    return start, end


def empty_totals():
    return {'visits': 0, 'unique_visitors': 0, 'conversions': 0, 'revenue': ZERO}


def by_visits_desc(rows: List[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    return sorted(rows, key=lambda row: (-row['visits'], row[key]))


class AnalyticsRepository(ABC):
    """Read-only aggregations over visits and their conversions.

    Every method filters on ``visited_at`` within the optional window and
    takes revenue from the Conversion rows, never from the orders.
    """

    @abstractmethod
    def totals(self, campaign_ids: Iterable[int], start=None, end=None) -> Dict[int, Dict[str, Any]]:
        """visits / unique_visitors / conversions / revenue per campaign in one pass.

        Campaigns without visits are present with zero totals.
        """

    @abstractmethod
    def unique_visitors(self, campaign_ids: Iterable[int], start=None, end=None) -> int:
        """Distinct sessions across all the given campaigns"""

    @abstractmethod
    def timeline(self, campaign_id: int, start=None, end=None) -> List[Dict[str, Any]]:
        """Per calendar day, ascending"""

    @abstractmethod
    def device_breakdown(self, campaign_id: int, start=None, end=None) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def geographic_breakdown(self, campaign_id: int, start=None, end=None) -> List[Dict[str, Any]]:
        pass


class SnapshotRepository(ABC):
    @abstractmethod
    def get(self, campaign_id: int, day: date, hour: Optional[int] = None):
        pass

    @abstractmethod
    def upsert(self, campaign_id: int, day: date, hour: Optional[int], values: Dict[str, Any]):
        """Insert or replace the (campaign, day, hour) row; hour None is the daily row"""

    @abstractmethod
    def for_campaign(self, campaign_id: int, start_day: date = None, end_day: date = None):
        """Ascending by day, the daily row ahead of that day's hourly rows"""
