from rest_framework import serializers


class TrackVisitSerializer(serializers.Serializer):
    tracking_code = serializers.CharField(max_length=64)
    session_id = serializers.CharField(max_length=128)
    landing_page = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    referrer = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    user_agent = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    device_type = serializers.CharField(max_length=10, required=False, allow_null=True)
    ip = serializers.IPAddressField(required=False, allow_null=True)
    country = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    city = serializers.CharField(max_length=128, required=False, allow_blank=True, allow_null=True)


class ActivitySerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=128)


class AttributeOrderSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=128, required=False, allow_blank=True, allow_null=True)
    order_id = serializers.CharField(max_length=64)
    customer_id = serializers.CharField(max_length=64)
    order_total = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
