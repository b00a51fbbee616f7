# apps/campaigns/repositories/memory.py
import copy
import itertools
import threading

from django.utils import timezone

from apps.campaigns.exceptions import ConflictError, NotFoundError
from apps.campaigns.models import Conversion
from .base import CampaignRepository, ConversionRepository, VisitRepository


class InMemoryStore:
    """Process-local tables shared by the in-memory repositories."""

    def __init__(self):
        self.campaigns = {}
        self.visits = {}
        self.conversions = {}
        self.snapshots = {}
        self.lock = threading.RLock()
        self._sequences = {}

    def next_id(self, table):
        with self.lock:
            sequence = self._sequences.setdefault(table, itertools.count(1))
            return next(sequence)


def _detached(instance):
    return copy.copy(instance) if instance is not None else None


class InMemoryCampaignRepository(CampaignRepository):
    def __init__(self, store):
        self.store = store

    def get(self, campaign_id):
        return _detached(self.store.campaigns.get(campaign_id))

    def get_by_tracking_code(self, tracking_code):
        for campaign in self.store.campaigns.values():
            if campaign.tracking_code == tracking_code:
                return _detached(campaign)
        return None

    def add(self, campaign):
        with self.store.lock:
            if any(c.tracking_code == campaign.tracking_code for c in self.store.campaigns.values()):
                raise ConflictError(f"Tracking code '{campaign.tracking_code}' already exists")
            now = timezone.now()
            campaign.id = self.store.next_id('campaign')
            campaign.created_at = now
            campaign.updated_at = now
            self.store.campaigns[campaign.id] = _detached(campaign)
        return campaign

    def save(self, campaign, fields):
        with self.store.lock:
            if campaign.id not in self.store.campaigns:
                raise NotFoundError(f"Campaign {campaign.id} not found")
            campaign.updated_at = timezone.now()
            self.store.campaigns[campaign.id] = _detached(campaign)
        return campaign

    def delete(self, campaign_id):
        with self.store.lock:
            if campaign_id not in self.store.campaigns:
                return False
            for child in [c.id for c in self.store.campaigns.values() if c.parent_id == campaign_id]:
                self.delete(child)
            del self.store.campaigns[campaign_id]
            for table in (self.store.visits, self.store.conversions, self.store.snapshots):
                for key in [k for k, row in table.items() if row.campaign_id == campaign_id]:
                    del table[key]
        return True

    def children(self, parent_id):
        return self.list(parent_id=parent_id)

    def list(self, platform=None, is_active=None, parent_id=None, top_level=False, search=None):
        rows = list(self.store.campaigns.values())
        if platform:
            rows = [c for c in rows if c.platform == platform]
        if is_active is not None:
            rows = [c for c in rows if c.is_active == is_active]
        if top_level:
            rows = [c for c in rows if c.parent_id is None]
        elif parent_id is not None:
            rows = [c for c in rows if c.parent_id == parent_id]
        if search:
            needle = search.lower()
            rows = [c for c in rows if needle in c.name.lower() or needle in c.tracking_code.lower()]
        rows.sort(key=lambda c: (c.created_at, c.id), reverse=True)
        return [_detached(c) for c in rows]


class InMemoryVisitRepository(VisitRepository):
    def __init__(self, store):
        self.store = store

    def get(self, visit_id):
        return _detached(self.store.visits.get(visit_id))

    def add(self, visit):
        with self.store.lock:
            visit.id = self.store.next_id('visit')
            self.store.visits[visit.id] = _detached(visit)
        return visit

    def touch(self, visit_id, last_activity_at, expires_at):
        with self.store.lock:
            visit = self.store.visits.get(visit_id)
            if visit is None:
                return None
            visit.last_activity_at = last_activity_at
            visit.expires_at = expires_at
            return _detached(visit)

    def active_for_session(self, session_id, now):
        rows = [
            v for v in self.store.visits.values()
            if v.session_id == session_id and v.expires_at >= now
        ]
        rows.sort(key=lambda v: (v.visited_at, v.id), reverse=True)
        return [_detached(v) for v in rows]

    def latest_for_session(self, session_id, campaign_id, since):
        rows = [
            v for v in self.store.visits.values()
            if v.session_id == session_id and v.campaign_id == campaign_id
            and not v.converted and v.visited_at >= since
        ]
        if not rows:
            return None
        return _detached(max(rows, key=lambda v: (v.visited_at, v.id)))


class InMemoryConversionRepository(ConversionRepository):
    def __init__(self, store):
        self.store = store

    def convert(self, visit_id, order_id, customer_id, revenue, now):
        with self.store.lock:
            visit = self.store.visits.get(visit_id)
            if visit is None:
                raise NotFoundError(f"Visit {visit_id} not found")
            if visit.converted:
                raise ConflictError(f"Visit {visit_id} is already converted")
            if any(c.order_id == order_id for c in self.store.conversions.values()):
                raise ConflictError(f"Order {order_id} is already attributed")

            conversion = Conversion(
                id=self.store.next_id('conversion'),
                campaign_id=visit.campaign_id,
                visit_id=visit_id,
                order_id=order_id,
                customer_id=customer_id,
                revenue=revenue,
                converted_at=now,
                created_at=now,
            )
            visit.converted = True
            visit.conversion_at = now
            visit.attributed_order_id = order_id
            visit.customer_id = customer_id
            self.store.conversions[conversion.id] = conversion
            return _detached(conversion)

    def for_visit(self, visit_id):
        for conversion in self.store.conversions.values():
            if conversion.visit_id == visit_id:
                return _detached(conversion)
        return None

    def for_order(self, order_id):
        for conversion in self.store.conversions.values():
            if conversion.order_id == order_id:
                return _detached(conversion)
        return None

    def for_campaign(self, campaign_id):
        rows = [c for c in self.store.conversions.values() if c.campaign_id == campaign_id]
        rows.sort(key=lambda c: (c.converted_at, c.id), reverse=True)
        return [_detached(c) for c in rows]
