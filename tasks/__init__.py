from core.celery import app as celery_app

__all__ = ('celery_app',)

# Register tasks explicitly
from .analytics import capture_snapshots, capture_daily_snapshots, capture_hourly_snapshots

# Register periodic tasks
from celery.schedules import crontab

celery_app.conf.beat_schedule = {
    'capture-daily-snapshots': {
        'task': 'tasks.analytics.capture_daily_snapshots',
        'schedule': crontab(hour=1, minute=0),  # Daily at 1 AM, for yesterday
    },
    'capture-hourly-snapshots': {
        'task': 'tasks.analytics.capture_hourly_snapshots',
        'schedule': crontab(minute=5),  # Previous hour
    },
}
