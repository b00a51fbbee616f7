from django.utils import timezone


class AttributionResolver:
    """Last-touch attribution over a session's active visits."""

    def __init__(self, visits):
        self.visits = visits

    def resolve(self, session_id, now=None):
        """Return the visit that should be credited, or None.

        Converted visits have already spent their credit and are skipped, so an
        order never lands on a visit that another order has claimed.
        Credit goes to the campaign that produced the visit, child or not.
        """
        now = now or timezone.now()
        candidates = [
            v for v in self.visits.active_for_session(session_id, now)
            if not v.converted
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda v: (v.visited_at, v.id))
