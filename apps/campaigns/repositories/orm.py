# apps/campaigns/repositories/orm.py
import logging

from django.db import IntegrityError, transaction
from django.db.models import Q

from apps.campaigns.exceptions import ConflictError, NotFoundError
from apps.campaigns.models import Campaign, Conversion, Visit
from .base import CampaignRepository, ConversionRepository, VisitRepository

logger = logging.getLogger(__name__)


class DjangoCampaignRepository(CampaignRepository):
    def get(self, campaign_id):
        return Campaign.objects.filter(pk=campaign_id).first()

    def get_by_tracking_code(self, tracking_code):
        return Campaign.objects.filter(tracking_code=tracking_code).first()

    def add(self, campaign):
        try:
            with transaction.atomic():
                campaign.save(force_insert=True)
        except IntegrityError as e:
            raise ConflictError(f"Tracking code '{campaign.tracking_code}' already exists") from e
        return campaign

    def save(self, campaign, fields):
        try:
            with transaction.atomic():
                campaign.save(update_fields=list(fields) + ['updated_at'])
        except IntegrityError as e:
            raise ConflictError(str(e)) from e
        return campaign

    def delete(self, campaign_id):
        deleted, _ = Campaign.objects.filter(pk=campaign_id).delete()
        return deleted > 0

    def children(self, parent_id):
        return list(Campaign.objects.filter(parent_id=parent_id))

    def list(self, platform=None, is_active=None, parent_id=None, top_level=False, search=None):
        queryset = Campaign.objects.all()
        if platform:
            queryset = queryset.filter(platform=platform)
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        if top_level:
            queryset = queryset.filter(parent__isnull=True)
        elif parent_id is not None:
            queryset = queryset.filter(parent_id=parent_id)
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(tracking_code__icontains=search))
        return list(queryset)


class DjangoVisitRepository(VisitRepository):
    def get(self, visit_id):
        return Visit.objects.filter(pk=visit_id).first()

    def add(self, visit):
        visit.save(force_insert=True)
        return visit

    def touch(self, visit_id, last_activity_at, expires_at):
        updated = Visit.objects.filter(pk=visit_id).update(
            last_activity_at=last_activity_at,
            expires_at=expires_at,
        )
        if not updated:
            return None
        return Visit.objects.get(pk=visit_id)

    def active_for_session(self, session_id, now):
        return list(
            Visit.objects.filter(session_id=session_id, expires_at__gte=now)
            .order_by('-visited_at', '-id')
        )

    def latest_for_session(self, session_id, campaign_id, since):
        return (
            Visit.objects.filter(
                session_id=session_id,
                campaign_id=campaign_id,
                converted=False,
                visited_at__gte=since,
            )
            .order_by('-visited_at', '-id')
            .first()
        )


class DjangoConversionRepository(ConversionRepository):
    def convert(self, visit_id, order_id, customer_id, revenue, now):
        try:
            with transaction.atomic():
                # Row lock where the backend supports it; no-op on SQLite
                visit = Visit.objects.select_for_update().filter(pk=visit_id).first()
                if visit is None:
                    raise NotFoundError(f"Visit {visit_id} not found")

                # The UPDATE re-checks converted=False itself, so a writer that
                # committed first leaves nothing to update here.
                updated = Visit.objects.filter(pk=visit_id, converted=False).update(
                    converted=True,
                    conversion_at=now,
                    attributed_order_id=order_id,
                    customer_id=customer_id,
                )
                if not updated:
                    raise ConflictError(f"Visit {visit_id} is already converted")
                if Conversion.objects.filter(order_id=order_id).exists():
                    raise ConflictError(f"Order {order_id} is already attributed")

                conversion = Conversion.objects.create(
                    campaign_id=visit.campaign_id,
                    visit_id=visit_id,
                    order_id=order_id,
                    customer_id=customer_id,
                    revenue=revenue,
                    converted_at=now,
                )
        except IntegrityError as e:
            logger.warning(f"Conversion insert rejected for visit {visit_id}: {e}")
            raise ConflictError(f"Visit {visit_id} or order {order_id} is already converted") from e
        return conversion

    def for_visit(self, visit_id):
        return Conversion.objects.filter(visit_id=visit_id).first()

    def for_order(self, order_id):
        return Conversion.objects.filter(order_id=order_id).first()

    def for_campaign(self, campaign_id):
        return list(Conversion.objects.filter(campaign_id=campaign_id).order_by('-converted_at', '-id'))
