# apps/tracking/views.py
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
import logging

from apps.campaigns.exceptions import AttributionError
from apps.campaigns.serializers import ConversionSerializer, VisitSerializer
from apps.campaigns.views import error_response
from . import services
from .serializers import ActivitySerializer, AttributeOrderSerializer, TrackVisitSerializer

logger = logging.getLogger(__name__)


def client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def track_visit(request):
    """Storefront page load carrying a campaign tracking code"""
    serializer = TrackVisitSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        visit, created = services.register_visit(
            data['tracking_code'],
            data['session_id'],
            landing_page=data.get('landing_page'),
            referrer=data.get('referrer') or request.META.get('HTTP_REFERER'),
            user_agent=data.get('user_agent') or request.META.get('HTTP_USER_AGENT'),
            device_type=data.get('device_type'),
            ip=data.get('ip') or client_ip(request),
            country=data.get('country'),
            city=data.get('city'),
        )
    except AttributionError as e:
        return error_response(e)

    # a dedup hit refreshes an existing visit instead of inserting one
    code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return Response(VisitSerializer(visit).data, status=code)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def record_activity(request):
    """Keep the session's latest visit inside its attribution window"""
    serializer = ActivitySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        visit = services.record_activity(serializer.validated_data['session_id'])
    except AttributionError as e:
        return error_response(e)

    return Response(VisitSerializer(visit).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def attribute_order(request):
    """Called by the order workflow once an order is confirmed"""
    serializer = AttributeOrderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    replayed = services.conversion_for_order(data['order_id'])
    if replayed is not None:
        return Response({'attributed': True, 'conversion': ConversionSerializer(replayed).data})

    try:
        conversion = services.attribute_order(
            data.get('session_id'),
            data['order_id'],
            data['customer_id'],
            data['order_total'],
        )
    except AttributionError as e:
        return error_response(e)

    if conversion is None:
        return Response({'attributed': False, 'order_id': data['order_id']})
    return Response({
        'attributed': True,
        'conversion': ConversionSerializer(conversion).data,
    }, status=status.HTTP_201_CREATED)
