import logging
from datetime import datetime, time, timedelta

from django.utils import timezone

from .metrics import build_metrics

logger = logging.getLogger(__name__)

SNAPSHOT_METRICS = (
    'total_visits', 'unique_visitors', 'total_conversions', 'total_revenue',
    'conversion_rate', 'roi', 'average_order_value',
)


def bucket_bounds(day, hour=None):
    """Window for a day, or for one hour of it."""
    if hour is None:
        return day, day
    start = datetime.combine(day, time(hour))
    return start, start + timedelta(hours=1) - timedelta(microseconds=1)


class SnapshotService:
    """Persists per-day and per-hour campaign metrics for historical reporting."""

    def __init__(self, metrics, snapshots):
        self.metrics = metrics
        self.snapshots = snapshots

    @staticmethod
    def _values(metrics):
        return {field: metrics[field] for field in SNAPSHOT_METRICS}

    def capture(self, campaign_id, day, hour=None):
        start, end = bucket_bounds(day, hour)
        values = self._values(self.metrics.metrics(campaign_id, start, end))
        return self.snapshots.upsert(campaign_id, day, hour, values)

    def capture_all(self, day, hour=None):
        """Snapshot every campaign from a single grouped query; returns the row count."""
        start, end = bucket_bounds(day, hour)
        campaigns = self.metrics.campaigns.list()
        totals = self.metrics.analytics_repo.totals([c.id for c in campaigns], start, end)
        for campaign in campaigns:
            values = self._values(build_metrics(totals[campaign.id], campaign.cost))
            self.snapshots.upsert(campaign.id, day, hour, values)

        bucket = f"{day} {hour:02d}:00" if hour is not None else f"{day}"
        logger.info(f"Captured {len(campaigns)} campaign snapshots for {bucket}")
        return len(campaigns)

    def metrics_for_day(self, campaign_id, day, now=None):
        """Snapshot figures for closed days, live aggregation for today or a missing snapshot."""
        today = timezone.localdate(now or timezone.now())
        if day < today:
            snapshot = self.snapshots.get(campaign_id, day)
            if snapshot is not None:
                return dict(snapshot.as_metrics(), source='snapshot')

        metrics = self.metrics.metrics(campaign_id, day, day)
        return dict(self._values(metrics), source='live')

    def history(self, campaign_id, start_day=None, end_day=None):
        self.metrics.get_campaign(campaign_id)
        return [
            dict(snapshot.as_metrics(), date=snapshot.date, hour=snapshot.bucket_hour)
            for snapshot in self.snapshots.for_campaign(campaign_id, start_day, end_day)
        ]
