import strawberry
from datetime import date
from typing import List, Optional
from apps.analytics import services as analytics
from apps.campaigns.registry import CampaignRegistry
from apps.campaigns.repositories import DjangoCampaignRepository
from .permissions import IsAuthenticated
from .types import CampaignMetricsType, CampaignType, LeaderboardEntryType


def registry():
    return CampaignRegistry(DjangoCampaignRepository())


@strawberry.type
class CampaignQueries:

    @strawberry.field(permission_classes=[IsAuthenticated])
    def campaigns(self, platform: Optional[str] = None, is_active: Optional[bool] = None,
                  parent_id: Optional[int] = None) -> List[CampaignType]:
        return registry().list(platform=platform, is_active=is_active, parent_id=parent_id)

    @strawberry.field(permission_classes=[IsAuthenticated])
    def campaign(self, id: int) -> CampaignType:
        return registry().get(id)

    @strawberry.field(permission_classes=[IsAuthenticated])
    def campaign_metrics(self, campaign_id: int, start: Optional[date] = None,
                         end: Optional[date] = None) -> CampaignMetricsType:
        metrics = analytics.get_campaign_metrics(campaign_id, start, end)
        return CampaignMetricsType(campaign_id=campaign_id, start=start, end=end, **metrics)

    @strawberry.field(permission_classes=[IsAuthenticated])
    def leaderboard(self, metric: str = 'roi', limit: int = 10) -> List[LeaderboardEntryType]:
        return [
            LeaderboardEntryType(
                rank=row['rank'],
                campaign_id=row['campaign_id'],
                name=row['name'],
                platform=row['platform'],
                tracking_code=row['tracking_code'],
                cost=row['cost'],
                visits=row['visits'],
                conversions=row['conversions'],
                revenue=row['revenue'],
                conversion_rate=row['conversion_rate'],
                roi=row['roi'],
            )
            for row in analytics.get_leaderboard(metric, limit)
        ]
