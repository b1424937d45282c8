# burnout/urls.py

from django.urls import path
from .views import (
    burnout_score_view, burnout_score_detail_view,
    team_burnout_view, team_daily_hours_view,
)

urlpatterns = [
    # GET ?userId= (cached or fresh score) and POST (store a score)
    path('', burnout_score_view, name='burnout-score'),
    path('<int:pk>/', burnout_score_detail_view, name='burnout-score-detail'),

    path('team/<int:manager_id>/', team_burnout_view, name='team-burnout'),
    path('team/<int:manager_id>/hours/', team_daily_hours_view, name='team-daily-hours'),
]
