# apps/analytics/repositories/orm.py
from decimal import Decimal

from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce, TruncDate

from apps.analytics.models import CampaignSnapshot
from apps.campaigns.models import Visit
from .base import (
    AnalyticsRepository,
    SnapshotRepository,
    ZERO,
    by_visits_desc,
    empty_totals,
    stored_hour,
    window_bounds,
)
from .performance import monitor_query_performance


def _revenue():
    return Coalesce(
        Sum('conversion__revenue'),
        Value(ZERO),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )


def _conversions():
    return Count('id', filter=Q(converted=True))


def _money(value):
    return Decimal(value or 0).quantize(Decimal('0.01'))


class DjangoAnalyticsRepository(AnalyticsRepository):
    def _visits(self, campaign_ids, start, end):
        start, end = window_bounds(start, end)
        queryset = Visit.objects.filter(campaign_id__in=list(campaign_ids))
        if start is not None:
            queryset = queryset.filter(visited_at__gte=start)
        if end is not None:
            queryset = queryset.filter(visited_at__lte=end)
        return queryset

    @monitor_query_performance
    def totals(self, campaign_ids, start=None, end=None):
        campaign_ids = list(campaign_ids)
        result = {campaign_id: empty_totals() for campaign_id in campaign_ids}
        if not campaign_ids:
            return result

        rows = (
            self._visits(campaign_ids, start, end)
            .values('campaign_id')
            .annotate(
                visits=Count('id'),
                unique_visitors=Count('session_id', distinct=True),
                conversions=_conversions(),
                revenue=_revenue(),
            )
            .order_by()
        )
        for row in rows:
            result[row['campaign_id']] = {
                'visits': row['visits'],
                'unique_visitors': row['unique_visitors'],
                'conversions': row['conversions'],
                'revenue': _money(row['revenue']),
            }
        return result

    @monitor_query_performance
    def unique_visitors(self, campaign_ids, start=None, end=None):
        return (
            self._visits(campaign_ids, start, end)
            .values('session_id')
            .distinct()
            .count()
        )

    @monitor_query_performance
    def timeline(self, campaign_id, start=None, end=None):
        rows = (
            self._visits([campaign_id], start, end)
            .annotate(day=TruncDate('visited_at'))
            .values('day')
            .annotate(visits=Count('id'), conversions=_conversions(), revenue=_revenue())
            .order_by('day')
        )
        return [{
            'date': row['day'],
            'visits': row['visits'],
            'conversions': row['conversions'],
            'revenue': _money(row['revenue']),
        } for row in rows]

    @monitor_query_performance
    def device_breakdown(self, campaign_id, start=None, end=None):
        rows = (
            self._visits([campaign_id], start, end)
            .values('device_type')
            .annotate(visits=Count('id'), conversions=_conversions())
            .order_by()
        )
        return by_visits_desc([{
            'device_type': row['device_type'] or 'unknown',
            'visits': row['visits'],
            'conversions': row['conversions'],
        } for row in rows], 'device_type')

    @monitor_query_performance
    def geographic_breakdown(self, campaign_id, start=None, end=None):
        rows = (
            self._visits([campaign_id], start, end)
            .values('country')
            .annotate(visits=Count('id'), conversions=_conversions(), revenue=_revenue())
            .order_by()
        )
        return by_visits_desc([{
            'country': row['country'] or 'Unknown',
            'visits': row['visits'],
            'conversions': row['conversions'],
            'revenue': _money(row['revenue']),
        } for row in rows], 'country')


class DjangoSnapshotRepository(SnapshotRepository):
    def get(self, campaign_id, day, hour=None):
        return CampaignSnapshot.objects.filter(campaign_id=campaign_id, date=day, hour=stored_hour(hour)).first()

    def upsert(self, campaign_id, day, hour, values):
        snapshot, created = CampaignSnapshot.objects.update_or_create(
            campaign_id=campaign_id,
            date=day,
            hour=stored_hour(hour),
            defaults=values,
        )
        return snapshot

    def for_campaign(self, campaign_id, start_day=None, end_day=None):
        queryset = CampaignSnapshot.objects.filter(campaign_id=campaign_id)
        if start_day is not None:
            queryset = queryset.filter(date__gte=start_day)
        if end_day is not None:
            queryset = queryset.filter(date__lte=end_day)
        return list(queryset.order_by('date', 'hour'))
