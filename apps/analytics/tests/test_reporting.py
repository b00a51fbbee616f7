from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase

from apps.analytics.hierarchy import HierarchyAggregator
from apps.analytics.leaderboard import Leaderboard
from apps.analytics.metrics import MetricsAggregator
from apps.analytics.models import DAILY_HOUR, CampaignSnapshot
from apps.analytics.repositories import (
    DjangoAnalyticsRepository,
    DjangoSnapshotRepository,
    InMemoryAnalyticsRepository,
    InMemorySnapshotRepository,
)
from apps.analytics.snapshots import SnapshotService
from apps.campaigns.exceptions import NotFoundError, ValidationError
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

NOW = datetime(2025, 2, 20, 10, 30, tzinfo=dt_timezone.utc)


class ReportingFixtureMixin:
    def setUp(self):
        self.store = InMemoryStore()
        campaigns = InMemoryCampaignRepository(self.store)
        analytics = InMemoryAnalyticsRepository(self.store)
        self.registry = CampaignRegistry(campaigns)
        self.tracker = VisitTracker(campaigns, InMemoryVisitRepository(self.store))
        self.recorder = ConversionRecorder(InMemoryConversionRepository(self.store))
        self.hierarchy = HierarchyAggregator(campaigns, analytics)
        self.leaderboard = Leaderboard(campaigns, analytics)
        self.metrics = MetricsAggregator(campaigns, analytics)
        self.snapshots = SnapshotService(self.metrics, InMemorySnapshotRepository(self.store))

    def seed(self, code, visits, revenues=(), when=NOW, prefix=None):
        tracked = [
            self.tracker.track(code, f'{prefix or code}-{n}', now=when)
            for n in range(visits)
        ]
        for visit, revenue in zip(tracked, revenues):
            self.recorder.record(visit, f'ORD-{code}-{visit.id}', 'cust', revenue, now=when)
        return tracked


class HierarchyAggregatorTest(ReportingFixtureMixin, TestCase):
    def test_rollup_sums_parent_and_children(self):
        parent = self.registry.create('Parent', 'multi', 'campaign', tracking_code='P', cost='100.00')
        for n, visits in enumerate([50, 30, 120, 80]):
            self.registry.create(f'Child {n}', 'instagram', 'post', parent_id=parent.id,
                                 tracking_code=f'C{n}', cost='10.00')
            self.seed(f'C{n}', visits)

        report = self.hierarchy.parent_analytics(parent.id)

        self.assertEqual(report['metrics']['total_visits'], 0)
        self.assertEqual([row['visits'] for row in report['children']], [50, 30, 120, 80])
        self.assertEqual(report['rollup']['total_visits'], 280)
        self.assertEqual(report['rollup']['unique_visitors'], 280)

    def test_roi_uses_parent_cost_only(self):
        parent = self.registry.create('Parent', 'multi', 'campaign', tracking_code='P', cost='100.00')
        child = self.registry.create('Child', 'tiktok', 'video', parent_id=parent.id,
                                     tracking_code='C', cost='400.00')
        self.seed('P', 2, revenues=[Decimal('50.00')])
        self.seed('C', 4, revenues=[Decimal('100.00'), Decimal('150.00')])

        report = self.hierarchy.parent_analytics(parent.id)

        # parent's own figures are untouched by the child
        self.assertEqual(report['metrics']['total_revenue'], Decimal('50.00'))
        self.assertEqual(report['metrics']['roi'], Decimal('-50.00'))

        child_row = report['children'][0]
        self.assertEqual(child_row['id'], child.id)
        self.assertEqual(child_row['revenue'], Decimal('250.00'))
        self.assertEqual(child_row['roi'], Decimal('-37.50'))

        rollup = report['rollup']
        self.assertEqual(rollup['total_revenue'], Decimal('300.00'))
        self.assertEqual(rollup['total_conversions'], 3)
        self.assertEqual(rollup['roi'], Decimal('200.00'))
        self.assertEqual(rollup['cost_per_conversion'], Decimal('33.33'))
        self.assertEqual(rollup['conversion_rate'], Decimal('50.00'))

    def test_platform_breakdown(self):
        parent = self.registry.create('Parent', 'multi', 'campaign', tracking_code='P')
        self.registry.create('Insta 1', 'instagram', 'post', parent_id=parent.id, tracking_code='I1')
        self.registry.create('Insta 2', 'instagram', 'reel', parent_id=parent.id, tracking_code='I2')
        self.registry.create('Tok', 'tiktok', 'video', parent_id=parent.id, tracking_code='T')
        self.seed('I1', 2)
        self.seed('I2', 3)
        self.seed('T', 1)

        platforms = self.hierarchy.parent_analytics(parent.id)['platform_breakdown']

        self.assertEqual(
            [(p['platform'], p['campaigns'], p['visits']) for p in platforms],
            [('instagram', 2, 5), ('tiktok', 1, 1), ('multi', 1, 0)],
        )

    def test_only_direct_children_are_included(self):
        parent = self.registry.create('Parent', 'multi', 'campaign', tracking_code='P')
        child = self.registry.create('Child', 'instagram', 'post', parent_id=parent.id, tracking_code='C')
        self.registry.create('Grandchild', 'instagram', 'post', parent_id=child.id, tracking_code='G')
        self.seed('G', 5)

        report = self.hierarchy.parent_analytics(parent.id)
        self.assertEqual(len(report['children']), 1)
        self.assertEqual(report['rollup']['total_visits'], 0)

    def test_unknown_parent(self):
        with self.assertRaises(NotFoundError):
            self.hierarchy.parent_analytics(404)


class LeaderboardTest(ReportingFixtureMixin, TestCase):
    def test_rank_by_revenue(self):
        first = self.registry.create('First', 'instagram', 'post', tracking_code='R1', cost='100.00')
        self.registry.create('Second', 'facebook', 'ad', tracking_code='R2', cost='100.00')
        third = self.registry.create('Third', 'tiktok', 'video', tracking_code='R3', cost='100.00')
        self.seed('R1', 5, revenues=[Decimal('750.00')])
        self.seed('R2', 5)
        self.seed('R3', 5, revenues=[Decimal('600.00'), Decimal('600.00')])

        ranked = self.leaderboard.rank('revenue', 2)

        self.assertEqual([row['campaign_id'] for row in ranked], [third.id, first.id])
        self.assertEqual([row['revenue'] for row in ranked], [Decimal('1200.00'), Decimal('750.00')])
        self.assertEqual([row['rank'] for row in ranked], [1, 2])

    def test_ties_ordered_by_campaign_id(self):
        campaigns = [
            self.registry.create(f'Tie {n}', 'instagram', 'post', tracking_code=f'T{n}')
            for n in range(3)
        ]
        for campaign in campaigns:
            self.seed(campaign.tracking_code, 2)

        ranked = self.leaderboard.rank('visits', 10)
        self.assertEqual([row['campaign_id'] for row in ranked], [c.id for c in campaigns])

    def test_inactive_campaigns_are_left_out(self):
        active = self.registry.create('Active', 'instagram', 'post', tracking_code='ON')
        self.registry.create('Paused', 'instagram', 'post', tracking_code='OFF', is_active=False)
        self.seed('OFF', 10)

        ranked = self.leaderboard.rank('visits', 10)
        self.assertEqual([row['campaign_id'] for row in ranked], [active.id])

    def test_rank_by_roi_and_conversions(self):
        cheap = self.registry.create('Cheap', 'instagram', 'post', tracking_code='CH', cost='10.00')
        pricey = self.registry.create('Pricey', 'instagram', 'post', tracking_code='PR', cost='1000.00')
        self.seed('CH', 3, revenues=[Decimal('20.00')])
        self.seed('PR', 3, revenues=[Decimal('100.00'), Decimal('100.00')])

        self.assertEqual(self.leaderboard.rank('roi', 1)[0]['campaign_id'], cheap.id)
        self.assertEqual(self.leaderboard.rank('conversions', 1)[0]['campaign_id'], pricey.id)

    def test_invalid_arguments(self):
        with self.assertRaises(ValidationError):
            self.leaderboard.rank('clicks', 10)
        with self.assertRaises(ValidationError):
            self.leaderboard.rank('roi', 0)
        with self.assertRaises(ValidationError):
            self.leaderboard.rank('roi', 101)

    def test_overview(self):
        self.registry.create('A', 'instagram', 'post', tracking_code='A', cost='100.00')
        self.registry.create('B', 'facebook', 'ad', tracking_code='B', cost='100.00')
        self.registry.create('Off', 'facebook', 'ad', tracking_code='OFF', cost='500.00', is_active=False)
        self.seed('A', 4, revenues=[Decimal('300.00')])
        self.seed('B', 6, revenues=[Decimal('100.00')])

        overview = self.leaderboard.overview()

        self.assertEqual(overview['active_campaigns'], 2)
        self.assertEqual(overview['total_visits'], 10)
        self.assertEqual(overview['total_conversions'], 2)
        self.assertEqual(overview['total_revenue'], Decimal('400.00'))
        self.assertEqual(overview['total_cost'], Decimal('200.00'))
        self.assertEqual(overview['roi'], Decimal('100.00'))
        self.assertEqual(overview['conversion_rate'], Decimal('20.00'))


class SnapshotServiceTest(ReportingFixtureMixin, TestCase):
    def test_capture_upserts(self):
        campaign = self.registry.create('Snap', 'instagram', 'post', tracking_code='SNAP', cost='10.00')
        self.seed('SNAP', 2, revenues=[Decimal('30.00')])
        day = NOW.date()

        self.snapshots.capture(campaign.id, day)
        self.seed('SNAP', 2, prefix='later')
        snapshot = self.snapshots.capture(campaign.id, day)

        self.assertEqual(len(self.store.snapshots), 1)
        self.assertEqual(snapshot.total_visits, 4)
        self.assertEqual(snapshot.total_revenue, Decimal('30.00'))
        self.assertEqual(snapshot.roi, Decimal('200.00'))

    def test_hourly_bucket(self):
        campaign = self.registry.create('Hourly', 'instagram', 'post', tracking_code='HR')
        self.seed('HR', 2, when=NOW)
        self.seed('HR', 3, when=NOW + timedelta(hours=1), prefix='next')

        snapshot = self.snapshots.capture(campaign.id, NOW.date(), hour=10)
        self.assertEqual(snapshot.hour, 10)
        self.assertEqual(snapshot.total_visits, 2)

    def test_capture_all(self):
        self.registry.create('One', 'instagram', 'post', tracking_code='ONE')
        self.registry.create('Two', 'tiktok', 'video', tracking_code='TWO')
        self.seed('ONE', 1)

        self.assertEqual(self.snapshots.capture_all(NOW.date()), 2)
        self.assertEqual(self.snapshots.capture_all(NOW.date()), 2)
        self.assertEqual(len(self.store.snapshots), 2)

    def test_metrics_for_day_prefers_snapshot_for_past_days(self):
        campaign = self.registry.create('Hist', 'instagram', 'post', tracking_code='HIST')
        self.seed('HIST', 3)
        day = NOW.date()
        self.snapshots.capture(campaign.id, day)
        # visits added after the snapshot only show up live
        self.seed('HIST', 2, prefix='late')

        past = self.snapshots.metrics_for_day(campaign.id, day, now=NOW + timedelta(days=1))
        self.assertEqual(past['source'], 'snapshot')
        self.assertEqual(past['total_visits'], 3)

        current = self.snapshots.metrics_for_day(campaign.id, day, now=NOW)
        self.assertEqual(current['source'], 'live')
        self.assertEqual(current['total_visits'], 5)

    def test_metrics_for_day_without_snapshot_is_live(self):
        campaign = self.registry.create('NoSnap', 'instagram', 'post', tracking_code='NS')
        self.seed('NS', 1)
        result = self.snapshots.metrics_for_day(campaign.id, NOW.date(), now=NOW + timedelta(days=3))
        self.assertEqual(result['source'], 'live')
        self.assertEqual(result['total_visits'], 1)


class DjangoReportingTest(TestCase):
    """The grouped ORM queries must agree with the in-memory figures."""

    def setUp(self):
        campaigns = DjangoCampaignRepository()
        analytics = DjangoAnalyticsRepository()
        self.registry = CampaignRegistry(campaigns)
        self.tracker = VisitTracker(campaigns, DjangoVisitRepository())
        self.recorder = ConversionRecorder(DjangoConversionRepository())
        self.hierarchy = HierarchyAggregator(campaigns, analytics)
        self.leaderboard = Leaderboard(campaigns, analytics)
        self.snapshots = SnapshotService(MetricsAggregator(campaigns, analytics), DjangoSnapshotRepository())

    def seed(self, code, visits, revenues=()):
        tracked = [self.tracker.track(code, f'{code}-{n}', now=NOW) for n in range(visits)]
        for visit, revenue in zip(tracked, revenues):
            self.recorder.record(visit, f'ORD-{visit.id}', 'cust', revenue, now=NOW)

    def test_parent_rollup(self):
        parent = self.registry.create('Parent', 'multi', 'campaign', tracking_code='P')
        for n, visits in enumerate([50, 30, 120, 80]):
            self.registry.create(f'Child {n}', 'instagram', 'post', parent_id=parent.id, tracking_code=f'C{n}')
            self.seed(f'C{n}', visits)

        report = self.hierarchy.parent_analytics(parent.id)
        self.assertEqual(report['rollup']['total_visits'], 280)
        self.assertEqual(report['metrics']['total_visits'], 0)

    def test_leaderboard_by_revenue(self):
        top = self.registry.create('Top', 'instagram', 'post', tracking_code='TOP', cost='1.00')
        self.registry.create('Zero', 'instagram', 'post', tracking_code='ZERO', cost='1.00')
        mid = self.registry.create('Mid', 'instagram', 'post', tracking_code='MID', cost='1.00')
        self.seed('MID', 1, revenues=[Decimal('750.00')])
        self.seed('ZERO', 1)
        self.seed('TOP', 2, revenues=[Decimal('1000.00'), Decimal('200.00')])

        ranked = self.leaderboard.rank('revenue', 2)
        self.assertEqual([row['campaign_id'] for row in ranked], [top.id, mid.id])

    def test_snapshot_rows_are_not_duplicated(self):
        campaign = self.registry.create('Snap', 'instagram', 'post', tracking_code='SNAP')
        self.seed('SNAP', 2)
        day = date(2025, 2, 20)

        self.snapshots.capture(campaign.id, day)
        self.snapshots.capture(campaign.id, day)
        self.snapshots.capture(campaign.id, day, hour=10)
        self.snapshots.capture(campaign.id, day, hour=10)

        self.assertEqual(CampaignSnapshot.objects.filter(campaign_id=campaign.id).count(), 2)
        daily = CampaignSnapshot.objects.get(campaign_id=campaign.id, hour=DAILY_HOUR)
        self.assertEqual(daily.total_visits, 2)

    def test_daily_row_is_unique_in_the_database(self):
        campaign = self.registry.create('Once', 'instagram', 'post', tracking_code='ONCE')
        day = date(2025, 2, 21)
        self.snapshots.capture(campaign.id, day)

        # the daily row has a concrete hour, so the plain unique constraint applies
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                CampaignSnapshot.objects.create(campaign_id=campaign.id, date=day)

        self.snapshots.capture(campaign.id, day, hour=0)
        history = self.snapshots.history(campaign.id)
        self.assertEqual([row['hour'] for row in history], [None, 0])
