from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase

from apps.analytics.metrics import MetricsAggregator, build_metrics, ratio
from apps.analytics.repositories import DjangoAnalyticsRepository, InMemoryAnalyticsRepository
from apps.campaigns.exceptions import NotFoundError
from apps.campaigns.registry import CampaignRegistry
from apps.campaigns.repositories import (
    DjangoCampaignRepository,
    DjangoConversionRepository,
    DjangoVisitRepository,
    InMemoryCampaignRepository,
    InMemoryConversionRepository,
    InMemoryStore,
    InMemoryVisitRepository,
)
from apps.tracking.conversions import ConversionRecorder
from apps.tracking.tracker import VisitTracker

DAY = datetime(2025, 1, 10, 15, 0, tzinfo=dt_timezone.utc)


class RatioTest(TestCase):
    def test_zero_denominator(self):
        self.assertEqual(ratio(5, 0, 100), Decimal('0.00'))

    def test_rounds_half_up(self):
        self.assertEqual(ratio(1, 8), Decimal('0.13'))  # 0.125
        self.assertEqual(ratio(2, 3, 100), Decimal('66.67'))

    def test_zero_cost_roi_is_zero(self):
        metrics = build_metrics({'visits': 3, 'unique_visitors': 3, 'conversions': 1, 'revenue': Decimal('40')}, 0)
        self.assertEqual(metrics['roi'], Decimal('0.00'))
        self.assertEqual(metrics['cost_per_visit'], Decimal('0.00'))
        self.assertEqual(metrics['cost_per_conversion'], Decimal('0.00'))


class MetricsScenarioMixin:
    """Runs the same scenarios against whichever repositories ``build`` returns."""

    def build(self):
        raise NotImplementedError

    def setUp(self):
        campaigns, visits, conversions, analytics = self.build()
        self.registry = CampaignRegistry(campaigns)
        self.tracker = VisitTracker(campaigns, visits)
        self.recorder = ConversionRecorder(conversions)
        self.aggregator = MetricsAggregator(campaigns, analytics)

    def seed(self, code, visits, conversions, revenue_each, when=DAY, prefix='s', device=None, country=None):
        tracked = []
        for n in range(visits):
            context = {'device_type': device, 'country': country}
            tracked.append(self.tracker.track(code, f'{prefix}-{n}', context, now=when))
        for visit in tracked[:conversions]:
            self.recorder.record(visit, f'ORD-{visit.id}', 'cust', revenue_each, now=when)
        return tracked

    def test_worked_example(self):
        campaign = self.registry.create('Seed', 'instagram', 'post', tracking_code='SEED', cost='250.00')
        self.seed('SEED', visits=50, conversions=5, revenue_each=Decimal('150.00'))

        metrics = self.aggregator.metrics(campaign.id)

        self.assertEqual(metrics['total_visits'], 50)
        self.assertEqual(metrics['unique_visitors'], 50)
        self.assertEqual(metrics['total_conversions'], 5)
        self.assertEqual(metrics['total_revenue'], Decimal('750.00'))
        self.assertEqual(metrics['conversion_rate'], Decimal('10.00'))
        self.assertEqual(metrics['average_order_value'], Decimal('150.00'))
        self.assertEqual(metrics['roi'], Decimal('200.00'))
        self.assertEqual(metrics['cost_per_visit'], Decimal('5.00'))
        self.assertEqual(metrics['cost_per_conversion'], Decimal('50.00'))

    def test_no_visits(self):
        campaign = self.registry.create('Empty', 'facebook', 'ad', tracking_code='EMPTY', cost='10.00')
        metrics = self.aggregator.metrics(campaign.id)
        self.assertEqual(metrics['total_visits'], 0)
        self.assertEqual(metrics['conversion_rate'], Decimal('0.00'))
        self.assertEqual(metrics['roi'], Decimal('-100.00'))

    def test_unique_visitors_count_sessions(self):
        campaign = self.registry.create('Repeat', 'facebook', 'ad', tracking_code='REPEAT')
        for _ in range(3):
            self.tracker.track('REPEAT', 'same-session', now=DAY)
        self.tracker.track('REPEAT', 'other-session', now=DAY)

        metrics = self.aggregator.metrics(campaign.id)
        self.assertEqual(metrics['total_visits'], 4)
        self.assertEqual(metrics['unique_visitors'], 2)

    def test_window_includes_and_excludes_conversion(self):
        campaign = self.registry.create('Window', 'tiktok', 'video', tracking_code='WIN', cost='50.00')
        self.seed('WIN', visits=1, conversions=1, revenue_each=Decimal('80.00'))

        included = self.aggregator.metrics(campaign.id, start=date(2025, 1, 10), end=date(2025, 1, 10))
        self.assertEqual(included['total_conversions'], 1)
        self.assertEqual(included['total_revenue'], Decimal('80.00'))

        excluded = self.aggregator.metrics(campaign.id, start=date(2025, 1, 11), end=date(2025, 1, 31))
        self.assertEqual(excluded['total_visits'], 0)
        self.assertEqual(excluded['total_conversions'], 0)
        self.assertEqual(excluded['total_revenue'], Decimal('0.00'))

    def test_timeline_groups_by_day(self):
        campaign = self.registry.create('Timeline', 'youtube', 'video', tracking_code='TL')
        self.seed('TL', visits=2, conversions=1, revenue_each=Decimal('30.00'), when=DAY, prefix='a')
        self.seed('TL', visits=3, conversions=0, revenue_each=Decimal('0'), when=DAY - timedelta(days=2), prefix='b')

        timeline = self.aggregator.timeline(campaign.id)

        self.assertEqual([point['date'] for point in timeline], [date(2025, 1, 8), date(2025, 1, 10)])
        self.assertEqual([point['visits'] for point in timeline], [3, 2])
        self.assertEqual(timeline[1]['conversions'], 1)
        self.assertEqual(timeline[1]['revenue'], Decimal('30.00'))

    def test_breakdowns(self):
        campaign = self.registry.create('Split', 'instagram', 'reel', tracking_code='SPLIT')
        self.seed('SPLIT', visits=3, conversions=1, revenue_each=Decimal('20.00'), prefix='m', device='mobile', country='CO')
        self.seed('SPLIT', visits=1, conversions=0, revenue_each=Decimal('0'), prefix='d', device='desktop')

        devices = self.aggregator.device_breakdown(campaign.id)
        self.assertEqual([(d['device_type'], d['visits'], d['conversions']) for d in devices],
                         [('mobile', 3, 1), ('desktop', 1, 0)])

        countries = self.aggregator.geographic_breakdown(campaign.id)
        self.assertEqual([(c['country'], c['visits']) for c in countries], [('CO', 3), ('Unknown', 1)])
        self.assertEqual(countries[0]['revenue'], Decimal('20.00'))

    def test_analytics_sections(self):
        campaign = self.registry.create('Full', 'instagram', 'post', tracking_code='FULL')
        self.seed('FULL', visits=2, conversions=1, revenue_each=Decimal('10.00'))

        bare = self.aggregator.analytics(campaign.id)
        self.assertEqual(bare['campaign']['tracking_code'], 'FULL')
        self.assertNotIn('timeline', bare)

        full = self.aggregator.analytics(campaign.id, include_timeline=True, include_devices=True,
                                         include_geography=True)
        self.assertEqual(len(full['timeline']), 1)
        self.assertIn('device_breakdown', full)
        self.assertIn('geographic_breakdown', full)

    def test_unknown_campaign(self):
        with self.assertRaises(NotFoundError):
            self.aggregator.metrics(999)
        with self.assertRaises(NotFoundError):
            self.aggregator.timeline(999)


class InMemoryMetricsTest(MetricsScenarioMixin, TestCase):
    def build(self):
        store = InMemoryStore()
        return (
            InMemoryCampaignRepository(store),
            InMemoryVisitRepository(store),
            InMemoryConversionRepository(store),
            InMemoryAnalyticsRepository(store),
        )


class DjangoMetricsTest(MetricsScenarioMixin, TestCase):
    def build(self):
        return (
            DjangoCampaignRepository(),
            DjangoVisitRepository(),
            DjangoConversionRepository(),
            DjangoAnalyticsRepository(),
        )
