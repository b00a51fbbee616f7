from django.urls import path
from . import views

urlpatterns = [
    path('campaigns/<int:campaign_id>/', views.campaign_analytics, name='campaign_analytics'),
    path('campaigns/<int:campaign_id>/timeline/', views.campaign_timeline, name='campaign_timeline'),
    path('campaigns/<int:campaign_id>/parent/', views.parent_analytics, name='parent_analytics'),
    path('campaigns/<int:campaign_id>/daily/<str:day>/', views.daily_metrics, name='daily_metrics'),
    path('campaigns/<int:campaign_id>/snapshots/', views.snapshot_history, name='snapshot_history'),
    path('leaderboard/', views.leaderboard, name='leaderboard'),
    path('overview/', views.overview, name='overview'),
    path('snapshots/trigger/', views.trigger_snapshots, name='trigger_snapshots'),
]
