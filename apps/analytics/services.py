"""Read-only reporting entry points backed by the Django repositories."""
from apps.campaigns.repositories import DjangoCampaignRepository
from .hierarchy import HierarchyAggregator
from .leaderboard import Leaderboard
from .metrics import MetricsAggregator
from .repositories import DjangoAnalyticsRepository, DjangoSnapshotRepository
from .snapshots import SnapshotService


def metrics_aggregator():
    return MetricsAggregator(DjangoCampaignRepository(), DjangoAnalyticsRepository())


def hierarchy_aggregator():
    return HierarchyAggregator(DjangoCampaignRepository(), DjangoAnalyticsRepository())


def leaderboard():
    return Leaderboard(DjangoCampaignRepository(), DjangoAnalyticsRepository())


def snapshot_service():
    return SnapshotService(metrics_aggregator(), DjangoSnapshotRepository())


def get_campaign_metrics(campaign_id, start=None, end=None):
    return metrics_aggregator().metrics(campaign_id, start, end)


def get_campaign_timeline(campaign_id, start=None, end=None):
    return metrics_aggregator().timeline(campaign_id, start, end)


def get_parent_analytics(parent_campaign_id, start=None, end=None):
    return hierarchy_aggregator().parent_analytics(parent_campaign_id, start, end)


def get_leaderboard(metric='roi', limit=10):
    return leaderboard().rank(metric, limit)
