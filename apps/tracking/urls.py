from django.urls import path
from . import views

urlpatterns = [
    path('visit/', views.track_visit, name='track-visit'),
    path('activity/', views.record_activity, name='track-activity'),
    path('attribute/', views.attribute_order, name='attribute-order'),
]
