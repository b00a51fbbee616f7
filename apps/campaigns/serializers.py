from rest_framework import serializers

from .models import Campaign, Visit, Conversion
from .registry import CampaignRegistry


class CampaignSerializer(serializers.ModelSerializer):
    parent_id = serializers.IntegerField(required=False, allow_null=True)
    # uniqueness is checked by the registry so a clash answers 409, not 400
    tracking_code = serializers.CharField(max_length=64, required=False)
    tracking_url = serializers.SerializerMethodField()

    class Meta:
        model = Campaign
        fields = [
            'id', 'parent_id', 'name', 'description', 'platform', 'campaign_type',
            'post_url', 'tracking_code', 'tracking_url', 'cost', 'budget', 'is_active',
            'starts_at', 'ends_at', 'metadata', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_tracking_url(self, obj) -> str:
        return CampaignRegistry.tracking_url(obj)


class CampaignUpdateSerializer(serializers.ModelSerializer):
    parent_id = serializers.IntegerField(required=False, allow_null=True)

    class Meta:
        model = Campaign
        fields = [
            'parent_id', 'name', 'description', 'post_url', 'cost', 'budget',
            'is_active', 'starts_at', 'ends_at', 'metadata',
        ]
        extra_kwargs = {field: {'required': False} for field in fields}


class VisitSerializer(serializers.ModelSerializer):
    campaign_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Visit
        fields = [
            'id', 'campaign_id', 'session_id', 'customer_id', 'landing_page', 'referrer',
            'device_type', 'country', 'city', 'visited_at', 'last_activity_at',
            'expires_at', 'converted', 'conversion_at', 'attributed_order_id',
        ]
        read_only_fields = fields


class ConversionSerializer(serializers.ModelSerializer):
    campaign_id = serializers.IntegerField(read_only=True)
    visit_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Conversion
        fields = ['id', 'campaign_id', 'visit_id', 'order_id', 'customer_id', 'revenue', 'converted_at']
        read_only_fields = fields
