from datetime import timedelta

from django.conf import settings
from django.db import models


PLATFORM_CHOICES = [
    ('instagram', 'Instagram'),
    ('facebook', 'Facebook'),
    ('tiktok', 'TikTok'),
    ('youtube', 'YouTube'),
    ('twitter', 'Twitter'),
    ('multi', 'Multi-platform'),
    ('other', 'Other'),
]

CAMPAIGN_TYPE_CHOICES = [
    ('post', 'Post'),
    ('reel', 'Reel'),
    ('story', 'Story'),
    ('video', 'Video'),
    ('ad', 'Ad'),
    ('campaign', 'Campaign'),  # parent campaigns
]

DEVICE_TYPE_CHOICES = [
    ('mobile', 'Mobile'),
    ('tablet', 'Tablet'),
    ('desktop', 'Desktop'),
    ('other', 'Other'),
]


def attribution_window():
    return timedelta(days=getattr(settings, 'ATTRIBUTION_WINDOW_DAYS', 30))


class Campaign(models.Model):
    class Meta:
        app_label = 'campaigns'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['is_active'], name='campaign_active_idx'),
            models.Index(fields=['platform'], name='campaign_platform_idx'),
        ]

    parent = models.ForeignKey(
        'self',
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name='children',
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    platform = models.CharField(max_length=20, choices=PLATFORM_CHOICES)
    campaign_type = models.CharField(max_length=20, choices=CAMPAIGN_TYPE_CHOICES)
    post_url = models.URLField(max_length=500, blank=True, default='')
    tracking_code = models.CharField(max_length=64, unique=True)
    cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    budget = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    is_active = models.BooleanField(default=True)
    starts_at = models.DateTimeField(null=True, blank=True)
    ends_at = models.DateTimeField(null=True, blank=True)
    metadata = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.tracking_code})"


class Visit(models.Model):
    class Meta:
        app_label = 'campaigns'
        indexes = [
            models.Index(fields=['session_id', 'expires_at'], name='visit_session_expiry_idx'),
            models.Index(fields=['campaign', 'visited_at'], name='visit_campaign_time_idx'),
        ]

    campaign = models.ForeignKey(Campaign, on_delete=models.CASCADE, related_name='visits')
    session_id = models.CharField(max_length=128)
    customer_id = models.CharField(max_length=64, null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(null=True, blank=True)
    referrer = models.TextField(null=True, blank=True)
    landing_page = models.TextField(null=True, blank=True)
    country = models.CharField(max_length=64, null=True, blank=True)
    city = models.CharField(max_length=128, null=True, blank=True)
    device_type = models.CharField(max_length=10, choices=DEVICE_TYPE_CHOICES, null=True, blank=True)
    visited_at = models.DateTimeField()
    last_activity_at = models.DateTimeField()
    expires_at = models.DateTimeField()
    converted = models.BooleanField(default=False)
    conversion_at = models.DateTimeField(null=True, blank=True)
    attributed_order_id = models.CharField(max_length=64, null=True, blank=True)

    def is_active(self, now):
        return now <= self.expires_at


class Conversion(models.Model):
    class Meta:
        app_label = 'campaigns'
        indexes = [
            models.Index(fields=['campaign', 'converted_at'], name='conversion_campaign_time_idx'),
        ]

    campaign = models.ForeignKey(Campaign, on_delete=models.CASCADE, related_name='conversions')
    visit = models.OneToOneField(Visit, on_delete=models.CASCADE, related_name='conversion')
    # one order credits at most one campaign
    order_id = models.CharField(max_length=64, unique=True)
    customer_id = models.CharField(max_length=64)
    revenue = models.DecimalField(max_digits=12, decimal_places=2)
    converted_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
