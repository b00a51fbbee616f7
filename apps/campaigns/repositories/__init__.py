from .base import CampaignRepository, ConversionRepository, VisitRepository
from .memory import (
    InMemoryCampaignRepository,
    InMemoryConversionRepository,
    InMemoryStore,
    InMemoryVisitRepository,
)
from .orm import DjangoCampaignRepository, DjangoConversionRepository, DjangoVisitRepository

__all__ = [
    'CampaignRepository', 'VisitRepository', 'ConversionRepository',
    'DjangoCampaignRepository', 'DjangoVisitRepository', 'DjangoConversionRepository',
    'InMemoryStore', 'InMemoryCampaignRepository', 'InMemoryVisitRepository',
    'InMemoryConversionRepository',
]
