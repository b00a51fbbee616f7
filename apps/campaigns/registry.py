import logging
import re
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.utils import timezone

from .exceptions import ConflictError, InvalidHierarchyError, NotFoundError, ValidationError
from .models import CAMPAIGN_TYPE_CHOICES, PLATFORM_CHOICES, Campaign

logger = logging.getLogger(__name__)

PLATFORMS = {value for value, _ in PLATFORM_CHOICES}
CAMPAIGN_TYPES = {value for value, _ in CAMPAIGN_TYPE_CHOICES}


def _money(value, field):
    try:
        amount = Decimal(str(value if value is not None else 0))
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if amount < 0:
        raise ValidationError(f"{field} must not be negative")
    return amount.quantize(Decimal('0.01'))


class CampaignRegistry:
    """Campaign lifecycle, tracking codes and the parent/child tree."""

    UPDATABLE_FIELDS = {
        'name', 'description', 'post_url', 'cost', 'budget', 'is_active',
        'starts_at', 'ends_at', 'metadata', 'parent_id',
    }

    def __init__(self, campaigns):
        self.campaigns = campaigns

    @staticmethod
    def generate_tracking_code(name, platform, now=None):
        now = now or timezone.now()
        sanitized = re.sub(r'[^A-Z0-9]', '_', name.upper())[:20]
        prefix = platform[:3].upper()
        suffix = str(int(now.timestamp() * 1000))[-6:]
        return f"{prefix}_{sanitized}_{suffix}"

    def create(self, name, platform, campaign_type, parent_id=None, tracking_code=None,
               description='', post_url='', cost=0, budget=0, starts_at=None, ends_at=None,
               metadata=None, is_active=True):
        if platform not in PLATFORMS:
            raise ValidationError(f"Unknown platform '{platform}'")
        if campaign_type not in CAMPAIGN_TYPES:
            raise ValidationError(f"Unknown campaign type '{campaign_type}'")
        self._check_dates(starts_at, ends_at)

        if parent_id is not None:
            # A new campaign has no descendants yet, so only existence matters here
            self.get(parent_id)

        tracking_code = tracking_code or self.generate_tracking_code(name, platform)
        if self.campaigns.get_by_tracking_code(tracking_code) is not None:
            raise ConflictError(f"Tracking code '{tracking_code}' already exists")

        campaign = Campaign(
            parent_id=parent_id,
            name=name,
            description=description or '',
            platform=platform,
            campaign_type=campaign_type,
            post_url=post_url or '',
            tracking_code=tracking_code,
            cost=_money(cost, 'cost'),
            budget=_money(budget, 'budget'),
            is_active=is_active,
            starts_at=starts_at,
            ends_at=ends_at,
            metadata=metadata,
        )
        self.campaigns.add(campaign)
        logger.info(f"Campaign {campaign.id} created with tracking code {tracking_code}")
        return campaign

    def get(self, campaign_id):
        campaign = self.campaigns.get(campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign {campaign_id} not found")
        return campaign

    def get_by_tracking_code(self, tracking_code):
        campaign = self.campaigns.get_by_tracking_code(tracking_code)
        if campaign is None:
            raise NotFoundError(f"No campaign with tracking code '{tracking_code}'")
        return campaign

    def list(self, platform=None, is_active=None, parent_id=None, top_level=False, search=None):
        return self.campaigns.list(
            platform=platform,
            is_active=is_active,
            parent_id=parent_id,
            top_level=top_level,
            search=search,
        )

    def list_children(self, parent_id):
        self.get(parent_id)
        return self.campaigns.children(parent_id)

    def ancestors(self, campaign_id):
        """Parent first, root last"""
        chain = []
        seen = {campaign_id}
        node = self.get(campaign_id)
        while node.parent_id is not None:
            if node.parent_id in seen:
                raise InvalidHierarchyError(f"Campaign {campaign_id} sits in a parent cycle")
            seen.add(node.parent_id)
            node = self.get(node.parent_id)
            chain.append(node)
        return chain

    def update(self, campaign_id, **changes):
        unknown = set(changes) - self.UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        campaign = self.get(campaign_id)
        if 'parent_id' in changes and changes['parent_id'] is not None:
            self._validate_parent(campaign.id, changes['parent_id'])
        for field in ('cost', 'budget'):
            if field in changes:
                changes[field] = _money(changes[field], field)
        self._check_dates(
            changes.get('starts_at', campaign.starts_at),
            changes.get('ends_at', campaign.ends_at),
        )

        for field, value in changes.items():
            setattr(campaign, field, value)
        self.campaigns.save(campaign, changes.keys())
        logger.info(f"Campaign {campaign_id} updated: {', '.join(sorted(changes))}")
        return campaign

    def activate(self, campaign_id):
        return self.update(campaign_id, is_active=True)

    def deactivate(self, campaign_id):
        return self.update(campaign_id, is_active=False)

    def delete(self, campaign_id):
        if not self.campaigns.delete(campaign_id):
            raise NotFoundError(f"Campaign {campaign_id} not found")
        logger.info(f"Campaign {campaign_id} deleted")

    @staticmethod
    def tracking_url(campaign):
        return f"{settings.FRONTEND_URL}?utm_campaign={campaign.tracking_code}"

    def _validate_parent(self, campaign_id, parent_id):
        if parent_id == campaign_id:
            raise InvalidHierarchyError("A campaign cannot be its own parent")
        parent = self.get(parent_id)
        if any(a.id == campaign_id for a in self.ancestors(parent.id)):
            raise InvalidHierarchyError(
                f"Campaign {parent_id} is a descendant of campaign {campaign_id}"
            )

    @staticmethod
    def _check_dates(starts_at, ends_at):
        if starts_at and ends_at and starts_at >= ends_at:
            raise ValidationError("starts_at must be before ends_at")
