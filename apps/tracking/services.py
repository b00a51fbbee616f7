"""Entry points used by the storefront and the order-placement workflow."""
import logging

from apps.campaigns.exceptions import ConflictError
from apps.campaigns.repositories import (
    DjangoCampaignRepository,
    DjangoConversionRepository,
    DjangoVisitRepository,
)
from .attribution import AttributionResolver
from .conversions import ConversionRecorder
from .tracker import VisitTracker

logger = logging.getLogger(__name__)


def visit_tracker():
    return VisitTracker(DjangoCampaignRepository(), DjangoVisitRepository())


def register_visit(tracking_code, session_id, landing_page=None, referrer=None, user_agent=None,
                   device_type=None, ip=None, country=None, city=None):
    """Like track_visit, but returns ``(visit, created)``; created is False when a dedup window reused a visit."""
    context = {
        'landing_page': landing_page,
        'referrer': referrer,
        'user_agent': user_agent,
        'device_type': device_type,
        'ip_address': ip,
        'country': country,
        'city': city,
    }
    return visit_tracker().track_or_reuse(tracking_code, session_id, context)


def track_visit(tracking_code, session_id, landing_page=None, referrer=None, user_agent=None,
                device_type=None, ip=None, country=None, city=None):
    visit, _ = register_visit(
        tracking_code, session_id, landing_page=landing_page, referrer=referrer,
        user_agent=user_agent, device_type=device_type, ip=ip, country=country, city=city,
    )
    return visit


def record_activity(session_id):
    return visit_tracker().record_session_activity(session_id)


def conversion_for_order(order_id):
    return DjangoConversionRepository().for_order(order_id)


def attribute_order(session_id, order_id, customer_id, order_total, resolver=None, recorder=None):
    """Credit a confirmed order to the session's last-touch campaign visit.

    Returns the Conversion, or None when there is nothing to attribute.
    Replaying an order returns its existing Conversion, so one order never
    credits two campaigns. A ConflictError (the visit was converted by another
    order concurrently) reaches the caller, which owns any retry.
    """
    if not session_id:
        return None
    resolver = resolver or AttributionResolver(DjangoVisitRepository())
    recorder = recorder or ConversionRecorder(DjangoConversionRepository())

    existing = recorder.for_order(order_id)
    if existing is not None:
        logger.info(f"Order {order_id} already attributed to campaign {existing.campaign_id}")
        return existing

    visit = resolver.resolve(session_id)
    if visit is None:
        logger.debug(f"No active campaign visit for session {session_id}, order {order_id}")
        return None
    try:
        return recorder.record(visit, order_id, customer_id, order_total)
    except ConflictError:
        # a concurrent replay of the same order committed first
        existing = recorder.for_order(order_id)
        if existing is None:
            raise
        return existing
