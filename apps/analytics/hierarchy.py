import logging
from collections import defaultdict
from decimal import Decimal

from apps.campaigns.exceptions import NotFoundError
from .metrics import HUNDRED, build_metrics, campaign_summary, ratio
from .repositories.base import ZERO

logger = logging.getLogger(__name__)


class HierarchyAggregator:
    """Parent campaign reporting over the parent and its direct children.

    Child spend is never added to the parent: the rollup's roi and
    cost_per_conversion are computed against the parent's own cost.
    """

    def __init__(self, campaigns, analytics_repo):
        self.campaigns = campaigns
        self.analytics_repo = analytics_repo

    def parent_analytics(self, parent_id, start=None, end=None):
        parent = self.campaigns.get(parent_id)
        if parent is None:
            raise NotFoundError(f"Campaign {parent_id} not found")

        children = sorted(self.campaigns.children(parent.id), key=lambda c: c.id)
        members = [parent] + children
        ids = [c.id for c in members]
        totals = self.analytics_repo.totals(ids, start, end)

        rollup_totals = {
            'visits': sum(totals[i]['visits'] for i in ids),
            'conversions': sum(totals[i]['conversions'] for i in ids),
            'revenue': sum((totals[i]['revenue'] for i in ids), ZERO),
            # a session may visit several members, so this is not a sum
            'unique_visitors': self.analytics_repo.unique_visitors(ids, start, end),
        }

        logger.debug(f"Parent analytics for campaign {parent.id} over {len(children)} children")
        return {
            'campaign': campaign_summary(parent),
            'period': {'start': start, 'end': end},
            'metrics': build_metrics(totals[parent.id], parent.cost),
            'children': [self._child_row(child, totals[child.id]) for child in children],
            'rollup': build_metrics(rollup_totals, parent.cost),
            'platform_breakdown': self._platforms(members, totals),
        }

    @staticmethod
    def _child_row(child, totals):
        return {
            'id': child.id,
            'name': child.name,
            'platform': child.platform,
            'tracking_code': child.tracking_code,
            'is_active': child.is_active,
            'cost': child.cost,
            'visits': totals['visits'],
            'conversions': totals['conversions'],
            'revenue': totals['revenue'],
            'roi': ratio(totals['revenue'] - Decimal(child.cost), child.cost, HUNDRED),
        }

    @staticmethod
    def _platforms(members, totals):
        groups = defaultdict(lambda: {'campaigns': 0, 'visits': 0, 'conversions': 0, 'revenue': ZERO})
        for campaign in members:
            group = groups[campaign.platform]
            group['campaigns'] += 1
            group['visits'] += totals[campaign.id]['visits']
            group['conversions'] += totals[campaign.id]['conversions']
            group['revenue'] += totals[campaign.id]['revenue']
        rows = [dict(group, platform=platform) for platform, group in groups.items()]
        return sorted(rows, key=lambda row: (-row['visits'], row['platform']))
