from .base import AnalyticsRepository, SnapshotRepository
from .cached import cache_heavy_query
from .memory import InMemoryAnalyticsRepository, InMemorySnapshotRepository
from .orm import DjangoAnalyticsRepository, DjangoSnapshotRepository
from .performance import monitor_query_performance

__all__ = [
    'AnalyticsRepository',
    'SnapshotRepository',
    'DjangoAnalyticsRepository',
    'DjangoSnapshotRepository',
    'InMemoryAnalyticsRepository',
    'InMemorySnapshotRepository',
    'cache_heavy_query',
    'monitor_query_performance',
]
