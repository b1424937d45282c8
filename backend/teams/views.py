# teams/views.py

from django.db.models import Q
from rest_framework import generics, permissions
from .models import Team, Project
from .serializers import TeamSerializer, ProjectSerializer


class TeamManagerPermission(permissions.BasePermission):
    """
    Read access for any member of the team, write access for its manager only.
    """
    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return obj.manager == request.user


class TeamListCreateView(generics.ListCreateAPIView):
    """
    GET: Teams the authenticated user manages or belongs to.
    POST: Create a team managed by the authenticated user.
    """
    serializer_class = TeamSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        return Team.objects.filter(Q(manager=user) | Q(members=user)).distinct()

team_list_create_view=TeamListCreateView.as_view()


class TeamRetrieveUpdateDestroyView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = TeamSerializer
    permission_classes = [permissions.IsAuthenticated, TeamManagerPermission]

    def get_queryset(self):
        user = self.request.user
        return Team.objects.filter(Q(manager=user) | Q(members=user)).distinct()

team_detail_view=TeamRetrieveUpdateDestroyView.as_view()


class ProjectListCreateView(generics.ListCreateAPIView):
    """
    GET: Projects of the teams the user manages or belongs to, plus projects
    the user is a direct member of.
    POST: Create a project.
    """
    serializer_class = ProjectSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        return Project.objects.filter(
            Q(members=user) | Q(team__manager=user) | Q(team__members=user)
        ).distinct()

project_list_create_view=ProjectListCreateView.as_view()


class ProjectRetrieveUpdateDestroyView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = ProjectSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        return Project.objects.filter(
            Q(members=user) | Q(team__manager=user) | Q(team__members=user)
        ).distinct()

project_detail_view=ProjectRetrieveUpdateDestroyView.as_view()
