from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

# hour value of the whole-day row; NOT NULL so the unique constraint covers it on every backend
DAILY_HOUR = -1


class CampaignSnapshot(models.Model):
    """Pre-aggregated metrics for one campaign over a day (hour DAILY_HOUR) or one hour of it."""

    class Meta:
        app_label = 'analytics'
        ordering = ['date', 'hour']
        constraints = [
            models.UniqueConstraint(
                fields=['campaign', 'date', 'hour'],
                name='unique_campaign_snapshot',
            ),
        ]

    campaign = models.ForeignKey('campaigns.Campaign', on_delete=models.CASCADE, related_name='snapshots')
    date = models.DateField()
    hour = models.SmallIntegerField(
        default=DAILY_HOUR,
        validators=[MinValueValidator(DAILY_HOUR), MaxValueValidator(23)],
    )
    total_visits = models.IntegerField(default=0)
    unique_visitors = models.IntegerField(default=0)
    total_conversions = models.IntegerField(default=0)
    total_revenue = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    conversion_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    roi = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    average_order_value = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    SNAPSHOT_FIELDS = (
        'total_visits', 'unique_visitors', 'total_conversions', 'total_revenue',
        'conversion_rate', 'roi', 'average_order_value',
    )

    @property
    def bucket_hour(self):
        """None for the daily row, else 0-23"""
        return None if self.hour == DAILY_HOUR else self.hour

    def as_metrics(self):
        return {field: getattr(self, field) for field in self.SNAPSHOT_FIELDS}
