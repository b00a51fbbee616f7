from django.contrib import admin

from .models import CampaignSnapshot


@admin.register(CampaignSnapshot)
class CampaignSnapshotAdmin(admin.ModelAdmin):
    list_display = ('campaign', 'date', 'hour', 'total_visits', 'total_conversions', 'total_revenue', 'roi')
    list_filter = ('date',)
