import logging
import re
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from apps.campaigns.exceptions import NotFoundError
from apps.campaigns.models import DEVICE_TYPE_CHOICES, Visit, attribution_window

logger = logging.getLogger(__name__)

DEVICE_TYPES = {value for value, _ in DEVICE_TYPE_CHOICES}

VISIT_CONTEXT_FIELDS = (
    'landing_page', 'referrer', 'user_agent', 'device_type',
    'ip_address', 'country', 'city',
)


def detect_device_type(user_agent):
    if not user_agent:
        return 'other'
    ua = user_agent.lower()
    # iPad user agents also carry "Mobile"
    if re.search(r'tablet|ipad', ua):
        return 'tablet'
    if re.search(r'mobile|android|iphone|ipod', ua):
        return 'mobile'
    if re.search(r'mozilla|chrome|safari|firefox', ua):
        return 'desktop'
    return 'other'


def is_active(visit, now):
    return now <= visit.expires_at


class VisitTracker:
    def __init__(self, campaigns, visits, dedup_seconds=None):
        self.campaigns = campaigns
        self.visits = visits
        if dedup_seconds is None:
            dedup_seconds = getattr(settings, 'VISIT_DEDUP_SECONDS', 0)
        self.dedup_window = timedelta(seconds=dedup_seconds)

    is_active = staticmethod(is_active)

    def track(self, tracking_code, session_id, context=None, now=None):
        visit, _ = self.track_or_reuse(tracking_code, session_id, context, now=now)
        return visit

    def track_or_reuse(self, tracking_code, session_id, context=None, now=None):
        """Record a page view coming from a campaign link, returning ``(visit, created)``.

        Paused campaigns still accept visits. Every call inserts a new Visit
        unless a dedup window is configured and the same session hit the same
        campaign within it on a visit that has not converted yet, in which case
        that visit's activity is refreshed and created is False.
        """
        now = now or timezone.now()
        campaign = self.campaigns.get_by_tracking_code(tracking_code)
        if campaign is None:
            raise NotFoundError(f"No campaign with tracking code '{tracking_code}'")

        if self.dedup_window:
            recent = self.visits.latest_for_session(session_id, campaign.id, now - self.dedup_window)
            if recent is not None:
                logger.debug(f"Visit {recent.id} reused for session {session_id}")
                return self.record_activity(recent.id, now=now), False

        context = {k: v for k, v in (context or {}).items() if k in VISIT_CONTEXT_FIELDS}
        if context.get('device_type') not in DEVICE_TYPES:
            context['device_type'] = detect_device_type(context.get('user_agent'))

        visit = Visit(
            campaign_id=campaign.id,
            session_id=session_id,
            visited_at=now,
            last_activity_at=now,
            expires_at=now + attribution_window(),
            **context,
        )
        self.visits.add(visit)
        logger.info(f"Visit {visit.id} tracked for campaign {campaign.id} (session {session_id})")
        return visit, True

    def record_activity(self, visit_id, now=None):
        now = now or timezone.now()
        visit = self.visits.touch(visit_id, last_activity_at=now, expires_at=now + attribution_window())
        if visit is None:
            raise NotFoundError(f"Visit {visit_id} not found")
        return visit

    def record_session_activity(self, session_id, now=None):
        now = now or timezone.now()
        active = self.visits.active_for_session(session_id, now)
        if not active:
            raise NotFoundError(f"No active visit for session {session_id}")
        return self.record_activity(active[0].id, now=now)
