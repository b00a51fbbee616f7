import logging
from decimal import Decimal, InvalidOperation

from django.utils import timezone

from apps.campaigns.exceptions import ConflictError, ValidationError

logger = logging.getLogger(__name__)


class ConversionRecorder:
    def __init__(self, conversions):
        self.conversions = conversions

    def for_order(self, order_id):
        return self.conversions.for_order(order_id)

    def record(self, visit, order_id, customer_id, revenue, now=None):
        if visit.converted:
            raise ConflictError(f"Visit {visit.id} is already converted")
        try:
            revenue = Decimal(str(revenue)).quantize(Decimal('0.01'))
        except InvalidOperation:
            raise ValidationError(f"Invalid revenue '{revenue}'")

        now = now or timezone.now()
        conversion = self.conversions.convert(visit.id, order_id, customer_id, revenue, now)
        logger.info(
            f"Order {order_id} attributed to campaign {conversion.campaign_id} "
            f"via visit {visit.id} (revenue {revenue})"
        )
        return conversion
