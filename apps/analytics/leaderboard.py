import logging
from decimal import Decimal

from apps.campaigns.exceptions import ValidationError
from .metrics import HUNDRED, build_metrics, ratio
from .repositories.base import ZERO
from .repositories.cached import cache_heavy_query

logger = logging.getLogger(__name__)

# ranking key -> field of the computed metrics
LEADERBOARD_METRICS = {
    'roi': 'roi',
    'revenue': 'total_revenue',
    'conversions': 'total_conversions',
    'visits': 'total_visits',
}
MAX_LIMIT = 100


class Leaderboard:
    def __init__(self, campaigns, analytics_repo):
        self.campaigns = campaigns
        self.analytics_repo = analytics_repo

    @staticmethod
    def validate(metric, limit):
        if metric not in LEADERBOARD_METRICS:
            raise ValidationError(
                f"Unknown metric '{metric}', expected one of {', '.join(LEADERBOARD_METRICS)}"
            )
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationError("limit must be an integer")
        if not 1 <= limit <= MAX_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}")
        return metric, limit

    @cache_heavy_query()
    def rank(self, metric='roi', limit=10):
        """All-time ranking of the active campaigns, ties by ascending id."""
        metric, limit = self.validate(metric, limit)
        campaigns = self.campaigns.active()
        totals = self.analytics_repo.totals([c.id for c in campaigns])

        rows = []
        for campaign in campaigns:
            metrics = build_metrics(totals[campaign.id], campaign.cost)
            rows.append({
                'campaign_id': campaign.id,
                'name': campaign.name,
                'platform': campaign.platform,
                'tracking_code': campaign.tracking_code,
                'parent_id': campaign.parent_id,
                'cost': campaign.cost,
                'visits': metrics['total_visits'],
                'conversions': metrics['total_conversions'],
                'revenue': metrics['total_revenue'],
                'conversion_rate': metrics['conversion_rate'],
                'roi': metrics['roi'],
                '_value': metrics[LEADERBOARD_METRICS[metric]],
            })

        rows.sort(key=lambda row: (-row['_value'], row['campaign_id']))
        ranked = []
        for position, row in enumerate(rows[:limit], start=1):
            row.pop('_value')
            row['rank'] = position
            ranked.append(row)
        logger.debug(f"Leaderboard by {metric}: {len(ranked)} of {len(rows)} active campaigns")
        return ranked

    @cache_heavy_query()
    def overview(self):
        campaigns = self.campaigns.active()
        totals = self.analytics_repo.totals([c.id for c in campaigns])

        visits = sum(t['visits'] for t in totals.values())
        conversions = sum(t['conversions'] for t in totals.values())
        revenue = sum((t['revenue'] for t in totals.values()), ZERO)
        cost = sum((Decimal(c.cost) for c in campaigns), ZERO)
        return {
            'active_campaigns': len(campaigns),
            'total_visits': visits,
            'total_conversions': conversions,
            'total_revenue': revenue,
            'total_cost': cost,
            'roi': ratio(revenue - cost, cost, HUNDRED),
            'conversion_rate': ratio(conversions, visits, HUNDRED),
        }
