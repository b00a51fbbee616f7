from django.contrib import admin

from .models import Campaign, Conversion, Visit


@admin.register(Campaign)
class CampaignAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'platform', 'campaign_type', 'tracking_code', 'cost', 'is_active', 'parent')
    list_filter = ('platform', 'campaign_type', 'is_active')
    search_fields = ('name', 'tracking_code')
    readonly_fields = ('tracking_code', 'created_at', 'updated_at')


@admin.register(Visit)
class VisitAdmin(admin.ModelAdmin):
    list_display = ('id', 'campaign', 'session_id', 'device_type', 'country', 'visited_at', 'expires_at', 'converted')
    list_filter = ('converted', 'device_type')
    search_fields = ('session_id', 'attributed_order_id')


@admin.register(Conversion)
class ConversionAdmin(admin.ModelAdmin):
    list_display = ('id', 'campaign', 'visit', 'order_id', 'customer_id', 'revenue', 'converted_at')
    search_fields = ('order_id', 'customer_id')

    # conversions are immutable once recorded
    def has_change_permission(self, request, obj=None):
        return False
