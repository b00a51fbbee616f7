# apps/analytics/repositories/memory.py
import copy
from collections import defaultdict

from django.utils import timezone

from apps.analytics.models import CampaignSnapshot
from .base import (
    AnalyticsRepository,
    SnapshotRepository,
    ZERO,
    by_visits_desc,
    empty_totals,
    stored_hour,
    window_bounds,
)


class InMemoryAnalyticsRepository(AnalyticsRepository):
    """Aggregates over an ``InMemoryStore``; mirrors the ORM queries row for row."""

    def __init__(self, store):
        self.store = store

    def _visits(self, campaign_ids, start, end):
        campaign_ids = set(campaign_ids)
        start, end = window_bounds(start, end)
        with self.store.lock:
            rows = [v for v in self.store.visits.values() if v.campaign_id in campaign_ids]
        if start is not None:
            rows = [v for v in rows if v.visited_at >= start]
        if end is not None:
            rows = [v for v in rows if v.visited_at <= end]
        return rows

    def _revenue_by_visit(self):
        with self.store.lock:
            return {c.visit_id: c.revenue for c in self.store.conversions.values()}

    def _accumulate(self, visits, key):
        revenue = self._revenue_by_visit()
        groups = defaultdict(lambda: {'visits': 0, 'conversions': 0, 'revenue': ZERO})
        for visit in visits:
            group = groups[key(visit)]
            group['visits'] += 1
            if visit.converted:
                group['conversions'] += 1
            group['revenue'] += revenue.get(visit.id, ZERO)
        return groups

    def totals(self, campaign_ids, start=None, end=None):
        campaign_ids = list(campaign_ids)
        result = {campaign_id: empty_totals() for campaign_id in campaign_ids}
        visits = self._visits(campaign_ids, start, end)
        groups = self._accumulate(visits, lambda v: v.campaign_id)
        for campaign_id, group in groups.items():
            sessions = {v.session_id for v in visits if v.campaign_id == campaign_id}
            result[campaign_id] = dict(group, unique_visitors=len(sessions))
        return result

    def unique_visitors(self, campaign_ids, start=None, end=None):
        return len({v.session_id for v in self._visits(campaign_ids, start, end)})

    def timeline(self, campaign_id, start=None, end=None):
        visits = self._visits([campaign_id], start, end)
        groups = self._accumulate(visits, lambda v: timezone.localtime(v.visited_at).date())
        return [dict(groups[day], date=day) for day in sorted(groups)]

    def device_breakdown(self, campaign_id, start=None, end=None):
        visits = self._visits([campaign_id], start, end)
        groups = self._accumulate(visits, lambda v: v.device_type or 'unknown')
        return by_visits_desc([{
            'device_type': device,
            'visits': group['visits'],
            'conversions': group['conversions'],
        } for device, group in groups.items()], 'device_type')

    def geographic_breakdown(self, campaign_id, start=None, end=None):
        visits = self._visits([campaign_id], start, end)
        groups = self._accumulate(visits, lambda v: v.country or 'Unknown')
        return by_visits_desc([dict(group, country=country) for country, group in groups.items()], 'country')


class InMemorySnapshotRepository(SnapshotRepository):
    def __init__(self, store):
        self.store = store

    def get(self, campaign_id, day, hour=None):
        snapshot = self.store.snapshots.get((campaign_id, day, stored_hour(hour)))
        return copy.copy(snapshot) if snapshot is not None else None

    def upsert(self, campaign_id, day, hour, values):
        key = (campaign_id, day, stored_hour(hour))
        with self.store.lock:
            snapshot = self.store.snapshots.get(key)
            now = timezone.now()
            if snapshot is None:
                snapshot = CampaignSnapshot(
                    id=self.store.next_id('snapshot'),
                    campaign_id=campaign_id,
                    date=day,
                    hour=stored_hour(hour),
                    created_at=now,
                )
                self.store.snapshots[key] = snapshot
            for field, value in values.items():
                setattr(snapshot, field, value)
            snapshot.updated_at = now
            return copy.copy(snapshot)

    def for_campaign(self, campaign_id, start_day=None, end_day=None):
        rows = [s for s in self.store.snapshots.values() if s.campaign_id == campaign_id]
        if start_day is not None:
            rows = [s for s in rows if s.date >= start_day]
        if end_day is not None:
            rows = [s for s in rows if s.date <= end_day]
        rows.sort(key=lambda s: (s.date, s.hour))
        return [copy.copy(s) for s in rows]
