# burnout/views.py

import logging

from django.contrib.auth import get_user_model
from rest_framework import generics, permissions, status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from teams.models import Project
from tasks.ai_engine.exceptions import TeamNotFoundError
from tasks.ai_engine.orchestrator import BurnoutOrchestrator
from tasks.ai_engine.team import get_team_burnout, get_team_daily_hours
from .models import BurnoutScore
from .serializers import BurnoutScoreSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


def _int_param(value, name):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError({name: f"{name} must be an integer"})


def _force_refresh(request):
    return request.query_params.get('forceRefresh') == 'true'


class BurnoutScoreView(APIView):
    """
    GET ?userId=&projectId=&forceRefresh=true
        The user's current score: the newest one younger than the freshness
        window, otherwise a freshly computed (and stored) one.
    POST
        Store a score record directly.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        raw_user_id = request.query_params.get('userId')
        if not raw_user_id:
            raise ValidationError({'userId': 'userId is required'})
        user_id = _int_param(raw_user_id, 'userId')

        if not User.objects.filter(pk=user_id).exists():
            raise NotFound('User not found')

        project_id = None
        raw_project_id = request.query_params.get('projectId')
        if raw_project_id:
            project_id = _int_param(raw_project_id, 'projectId')
            if not Project.objects.filter(pk=project_id).exists():
                raise NotFound('Project not found')

        record = BurnoutOrchestrator().get_or_compute_score(
            user_id,
            project_id=project_id,
            force_refresh=_force_refresh(request),
        )
        return Response(BurnoutScoreSerializer(record).data)

    def post(self, request):
        serializer = BurnoutScoreSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = serializer.save()
        logger.info(f"Burnout score {record.pk} stored manually for user {record.user_id}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)

burnout_score_view=BurnoutScoreView.as_view()


class BurnoutScoreDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET, PUT, PATCH, DELETE for a single stored score.
    The scoring pipeline itself never updates rows; this is the explicit
    administrative path.
    """
    serializer_class = BurnoutScoreSerializer
    permission_classes = [permissions.IsAuthenticated]
    queryset = BurnoutScore.objects.all()

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'Burnout score deleted successfully'}, status=status.HTTP_200_OK)

burnout_score_detail_view=BurnoutScoreDetailView.as_view()


class TeamBurnoutView(APIView):
    """GET ?forceRefresh=true: burnout summary for every member of the manager's teams."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, manager_id):
        try:
            summary = get_team_burnout(manager_id, force_refresh=_force_refresh(request))
        except TeamNotFoundError:
            raise NotFound('No teams found for this manager')
        return Response(summary)

team_burnout_view=TeamBurnoutView.as_view()


class TeamDailyHoursView(APIView):
    """GET: hours of completed work per day over the last 28 days."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, manager_id):
        try:
            hours = get_team_daily_hours(manager_id)
        except TeamNotFoundError:
            raise NotFound('No teams found for this manager')
        return Response(hours)

team_daily_hours_view=TeamDailyHoursView.as_view()
