from decimal import Decimal, ROUND_HALF_UP

from apps.campaigns.exceptions import NotFoundError
from .repositories.base import ZERO

TWO_PLACES = Decimal('0.01')
HUNDRED = Decimal('100')


def ratio(numerator, denominator, scale=1):
    """numerator / denominator * scale, half-up to cents; 0.00 when the denominator is zero."""
    denominator = Decimal(denominator)
    if denominator == 0:
        return ZERO
    value = Decimal(numerator) / denominator * Decimal(scale)
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def build_metrics(totals, cost):
    """Derive the reporting figures from raw totals and the campaign's spend."""
    visits = totals['visits']
    conversions = totals['conversions']
    revenue = Decimal(totals['revenue']).quantize(TWO_PLACES)
    cost = Decimal(cost or 0)
    return {
        'total_visits': visits,
        'unique_visitors': totals['unique_visitors'],
        'total_conversions': conversions,
        'total_revenue': revenue,
        'conversion_rate': ratio(conversions, visits, HUNDRED),
        'average_order_value': ratio(revenue, conversions),
        'roi': ratio(revenue - cost, cost, HUNDRED),
        'cost_per_visit': ratio(cost, visits),
        'cost_per_conversion': ratio(cost, conversions),
    }


def campaign_summary(campaign):
    return {
        'id': campaign.id,
        'name': campaign.name,
        'platform': campaign.platform,
        'campaign_type': campaign.campaign_type,
        'tracking_code': campaign.tracking_code,
        'parent_id': campaign.parent_id,
        'cost': campaign.cost,
        'budget': campaign.budget,
        'is_active': campaign.is_active,
    }


class MetricsAggregator:
    """Visit, conversion and revenue statistics for a single campaign.

    ``start``/``end`` bound ``visited_at``; bare dates cover whole days, so a
    conversion made on the end date is still counted.
    """

    def __init__(self, campaigns, analytics_repo):
        self.campaigns = campaigns
        self.analytics_repo = analytics_repo

    def get_campaign(self, campaign_id):
        campaign = self.campaigns.get(campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign {campaign_id} not found")
        return campaign

    def metrics(self, campaign_id, start=None, end=None):
        campaign = self.get_campaign(campaign_id)
        totals = self.analytics_repo.totals([campaign.id], start, end)[campaign.id]
        return build_metrics(totals, campaign.cost)

    def timeline(self, campaign_id, start=None, end=None):
        campaign = self.get_campaign(campaign_id)
        return self.analytics_repo.timeline(campaign.id, start, end)

    def device_breakdown(self, campaign_id, start=None, end=None):
        campaign = self.get_campaign(campaign_id)
        return self.analytics_repo.device_breakdown(campaign.id, start, end)

    def geographic_breakdown(self, campaign_id, start=None, end=None):
        campaign = self.get_campaign(campaign_id)
        return self.analytics_repo.geographic_breakdown(campaign.id, start, end)

    def analytics(self, campaign_id, start=None, end=None, include_timeline=False,
                  include_devices=False, include_geography=False):
        campaign = self.get_campaign(campaign_id)
        totals = self.analytics_repo.totals([campaign.id], start, end)[campaign.id]
        result = {
            'campaign': campaign_summary(campaign),
            'period': {'start': start, 'end': end},
            'metrics': build_metrics(totals, campaign.cost),
        }
        if include_timeline:
            result['timeline'] = self.analytics_repo.timeline(campaign.id, start, end)
        if include_devices:
            result['device_breakdown'] = self.analytics_repo.device_breakdown(campaign.id, start, end)
        if include_geography:
            result['geographic_breakdown'] = self.analytics_repo.geographic_breakdown(campaign.id, start, end)
        return result
