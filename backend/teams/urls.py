# teams/urls.py

from django.urls import path
from .views import (
    team_list_create_view, team_detail_view,
    project_list_create_view, project_detail_view,
)

urlpatterns = [
    path('', team_list_create_view, name='team-list-create'),
    path('<int:pk>/', team_detail_view, name='team-detail'),

    path('projects/', project_list_create_view, name='project-list-create'),
    path('projects/<int:pk>/', project_detail_view, name='project-detail'),
]
