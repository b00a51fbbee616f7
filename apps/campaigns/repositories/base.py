# apps/campaigns/repositories/base.py
from abc import ABC, abstractmethod


class CampaignRepository(ABC):
    @abstractmethod
    def get(self, campaign_id):
        """Campaign or None"""

    @abstractmethod
    def get_by_tracking_code(self, tracking_code):
        """Campaign or None, regardless of is_active"""

    @abstractmethod
    def add(self, campaign):
        """Persist a new campaign; ConflictError on a duplicate tracking code"""

    @abstractmethod
    def save(self, campaign, fields):
        pass

    @abstractmethod
    def delete(self, campaign_id) -> bool:
        """Delete with its visits, conversions, snapshots and child campaigns"""

    @abstractmethod
    def children(self, parent_id):
        pass

    @abstractmethod
    def list(self, platform=None, is_active=None, parent_id=None, top_level=False, search=None):
        """Newest first"""

    def active(self):
        return self.list(is_active=True)


class VisitRepository(ABC):
    @abstractmethod
    def get(self, visit_id):
        pass

    @abstractmethod
    def add(self, visit):
        pass

    @abstractmethod
    def touch(self, visit_id, last_activity_at, expires_at):
        """Update activity fields only. Returns the visit or None"""

    @abstractmethod
    def active_for_session(self, session_id, now):
        """Visits of the session with expires_at >= now, newest visited_at first"""

    @abstractmethod
    def latest_for_session(self, session_id, campaign_id, since):
        """Most recent unconverted visit of the session on the campaign visited at or after `since`"""


class ConversionRepository(ABC):
    @abstractmethod
    def convert(self, visit_id, order_id, customer_id, revenue, now):
        """Mark the visit converted and insert its Conversion as one atomic unit.

        Raises ConflictError when the visit is already converted (including a
        concurrent writer winning first) or the order is already
        credited to another visit, and NotFoundError when the visit does not exist.
        """

    @abstractmethod
    def for_visit(self, visit_id):
        pass

    @abstractmethod
    def for_order(self, order_id):
        pass

    @abstractmethod
    def for_campaign(self, campaign_id):
        """Newest first"""
