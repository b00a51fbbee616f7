from datetime import timedelta

from celery import shared_task
from django.utils import timezone
from django.utils.dateparse import parse_date
from tenacity import retry, stop_after_attempt, wait_exponential
import logging

logger = logging.getLogger(__name__)


@shared_task
@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10))
def capture_snapshots(day=None, hour=None):
    """Persist campaign metrics for a day (default yesterday) or one hour of it"""
    from apps.analytics.services import snapshot_service

    if isinstance(day, str):
        day = parse_date(day)
    day = day or timezone.localdate() - timedelta(days=1)

    captured = snapshot_service().capture_all(day, hour)
    logger.info(f"Snapshots stored for {day} hour={hour}: {captured} campaigns")
    return {'date': day.isoformat(), 'hour': hour, 'campaigns_processed': captured}


@shared_task
def capture_daily_snapshots():
    """Close out yesterday once it can no longer change"""
    return capture_snapshots(timezone.localdate() - timedelta(days=1))


@shared_task
def capture_hourly_snapshots():
    previous = timezone.localtime() - timedelta(hours=1)
    return capture_snapshots(previous.date(), previous.hour)
