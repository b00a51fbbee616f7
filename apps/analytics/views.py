import logging

from django.utils.dateparse import parse_date, parse_datetime
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.campaigns.exceptions import AttributionError, ValidationError
from apps.campaigns.views import error_response, query_flag
from . import services
from .repositories.base import window_bounds

logger = logging.getLogger(__name__)


def parse_day(value, name='date'):
    try:
        parsed = parse_date(value)
    except ValueError:
        # well formed but impossible, e.g. 2025-02-30
        parsed = None
    if parsed is None:
        raise ValidationError(f"Invalid {name} '{value}', expected YYYY-MM-DD")
    return parsed


def parse_bound(value, name):
    """Query string bound: a date (whole day) or an ISO datetime."""
    if not value:
        return None
    if 'T' not in value:
        return parse_day(value, name)
    try:
        parsed = parse_datetime(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"Invalid {name} '{value}', expected an ISO datetime")
    return parsed


def window(request):
    start = parse_bound(request.query_params.get('start'), 'start')
    end = parse_bound(request.query_params.get('end'), 'end')
    lower, upper = window_bounds(start, end)
    if lower and upper and lower > upper:
        raise ValidationError("start must not be after end")
    return start, end


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def campaign_analytics(request, campaign_id):
    """Metrics for one campaign with optional timeline, device and country sections"""
    params = request.query_params
    try:
        start, end = window(request)
        data = services.metrics_aggregator().analytics(
            campaign_id,
            start,
            end,
            include_timeline=bool(query_flag(params, 'include_timeline')),
            include_devices=bool(query_flag(params, 'include_devices')),
            include_geography=bool(query_flag(params, 'include_geography')),
        )
    except AttributionError as e:
        return error_response(e)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def campaign_timeline(request, campaign_id):
    try:
        start, end = window(request)
        timeline = services.get_campaign_timeline(campaign_id, start, end)
    except AttributionError as e:
        return error_response(e)
    return Response({
        'campaign_id': campaign_id,
        'timeline': timeline,
        'total_days': len(timeline),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def parent_analytics(request, campaign_id):
    """Parent metrics, per-child rows, rollup and platform breakdown"""
    try:
        start, end = window(request)
        data = services.get_parent_analytics(campaign_id, start, end)
    except AttributionError as e:
        return error_response(e)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def daily_metrics(request, campaign_id, day):
    try:
        parsed = parse_day(day)
        data = services.snapshot_service().metrics_for_day(campaign_id, parsed)
    except AttributionError as e:
        return error_response(e)
    return Response(dict(data, campaign_id=campaign_id, date=parsed))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def snapshot_history(request, campaign_id):
    """Stored daily and hourly snapshots, oldest first"""
    try:
        params = request.query_params
        start = parse_day(params['start'], 'start') if params.get('start') else None
        end = parse_day(params['end'], 'end') if params.get('end') else None
        rows = services.snapshot_service().history(campaign_id, start, end)
    except AttributionError as e:
        return error_response(e)
    return Response({'campaign_id': campaign_id, 'snapshots': rows})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def leaderboard(request):
    metric = request.query_params.get('metric', 'roi')
    limit = request.query_params.get('limit', 10)
    try:
        rows = services.get_leaderboard(metric, limit)
    except AttributionError as e:
        return error_response(e)
    return Response({
        'metric': metric,
        'campaigns': rows,
        'total_campaigns': len(rows),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def overview(request):
    return Response(services.leaderboard().overview())


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def trigger_snapshots(request):
    """Queue a snapshot run for a day (default yesterday) or one hour of it"""
    from tasks.analytics import capture_snapshots

    day = request.data.get('date')
    hour = request.data.get('hour')
    try:
        if day:
            parse_day(day)
        if hour is not None and not (str(hour).isdigit() and 0 <= int(hour) <= 23):
            raise ValidationError("hour must be between 0 and 23")
    except AttributionError as e:
        return error_response(e)

    result = capture_snapshots.delay(day, int(hour) if hour is not None else None)
    return Response({'task_id': result.id, 'status': 'queued'})
