import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .exceptions import AttributionError
from .registry import CampaignRegistry
from .repositories import DjangoCampaignRepository
from .serializers import CampaignSerializer, CampaignUpdateSerializer

logger = logging.getLogger(__name__)


def error_response(exc):
    logger.warning(f"{exc.__class__.__name__}: {exc}")
    return Response({'error': str(exc)}, status=exc.status_code)


def query_flag(params, name):
    value = params.get(name)
    if value is None:
        return None
    return value.lower() in ('1', 'true', 'yes')


class CampaignViewSet(viewsets.ViewSet):
    """Campaign CRUD routed through the registry so hierarchy and code rules apply."""

    permission_classes = [IsAuthenticated]
    serializer_class = CampaignSerializer
    lookup_value_regex = r'\d+'

    def get_registry(self):
        return CampaignRegistry(DjangoCampaignRepository())

    def list(self, request):
        params = request.query_params
        parent_id = params.get('parent_id')
        campaigns = self.get_registry().list(
            platform=params.get('platform'),
            is_active=query_flag(params, 'is_active'),
            parent_id=int(parent_id) if parent_id and parent_id.isdigit() else None,
            top_level=bool(query_flag(params, 'top_level')),
            search=params.get('search'),
        )
        return Response(CampaignSerializer(campaigns, many=True).data)

    def create(self, request):
        serializer = CampaignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            campaign = self.get_registry().create(**serializer.validated_data)
        except AttributionError as e:
            return error_response(e)
        return Response(CampaignSerializer(campaign).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        try:
            campaign = self.get_registry().get(int(pk))
        except AttributionError as e:
            return error_response(e)
        return Response(CampaignSerializer(campaign).data)

    def update(self, request, pk=None):
        serializer = CampaignUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            campaign = self.get_registry().update(int(pk), **serializer.validated_data)
        except AttributionError as e:
            return error_response(e)
        return Response(CampaignSerializer(campaign).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        try:
            self.get_registry().delete(int(pk))
        except AttributionError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def activate(self, request, pk=None):
        try:
            campaign = self.get_registry().activate(int(pk))
        except AttributionError as e:
            return error_response(e)
        return Response(CampaignSerializer(campaign).data)

    @action(detail=True, methods=['post'])
    def deactivate(self, request, pk=None):
        try:
            campaign = self.get_registry().deactivate(int(pk))
        except AttributionError as e:
            return error_response(e)
        return Response(CampaignSerializer(campaign).data)

    @action(detail=True, methods=['get'])
    def children(self, request, pk=None):
        try:
            children = self.get_registry().list_children(int(pk))
        except AttributionError as e:
            return error_response(e)
        return Response(CampaignSerializer(children, many=True).data)
