import strawberry
import strawberry_django
from datetime import date
from decimal import Decimal
from typing import Optional
from strawberry import auto
from apps.campaigns.models import Campaign


@strawberry_django.type(Campaign)
class CampaignType:
    id: auto
    parent_id: Optional[int]
    name: auto
    description: auto
    platform: auto
    campaign_type: auto
    post_url: auto
    tracking_code: auto
    cost: auto
    budget: auto
    is_active: auto
    starts_at: auto
    ends_at: auto
    created_at: auto


@strawberry.type
class CampaignMetricsType:
    campaign_id: int
    start: Optional[date]
    end: Optional[date]
    total_visits: int
    unique_visitors: int
    total_conversions: int
    total_revenue: Decimal
    conversion_rate: Decimal
    average_order_value: Decimal
    roi: Decimal
    cost_per_visit: Decimal
    cost_per_conversion: Decimal


@strawberry.type
class LeaderboardEntryType:
    rank: int
    campaign_id: int
    name: str
    platform: str
    tracking_code: str
    cost: Decimal
    visits: int
    conversions: int
    revenue: Decimal
    conversion_rate: Decimal
    roi: Decimal
