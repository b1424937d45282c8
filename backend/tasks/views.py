# tasks/views.py

import logging

from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from notifications.models import Notification
from teams.models import Team
from .ai_engine.prioritizer import TaskPrioritizer
from .models import Task, TaskStatus
from .serializers import SmartSortRequestSerializer, TaskSerializer, TaskStatusUpdateSerializer

logger = logging.getLogger(__name__)


def visible_tasks(user):
    """Tasks the user works on, created, or can see through a team or project."""
    return Task.objects.filter(
        Q(assigned_to=user)
        | Q(created_by=user)
        | Q(project__members=user)
        | Q(project__team__manager=user)
        | Q(project__team__members=user)
    ).select_related('project', 'assigned_to').distinct()


class TaskListCreateView(generics.ListCreateAPIView):
    """
    GET: Tasks visible to the authenticated user.
         Optional filters: ?projectId=, ?assignedTo=, ?status= ("todo" accepted).
    POST: Create a new task.
    """
    serializer_class = TaskSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        qs = visible_tasks(self.request.user)
        params = self.request.query_params

        if params.get('projectId'):
            qs = qs.filter(project_id=params['projectId'])
        if params.get('assignedTo'):
            qs = qs.filter(assigned_to_id=params['assignedTo'])
        if params.get('status'):
            try:
                qs = qs.filter(status=TaskStatus.normalize(params['status']))
            except ValueError:
                return qs.none()
        return qs

list_create_view=TaskListCreateView.as_view()


class TaskRetrieveUpdateDestroyView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET, PUT, PATCH, DELETE for a specific task instance.
    Lifecycle timestamps are only set through the status endpoint.
    """
    serializer_class = TaskSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return visible_tasks(self.request.user)

retreive_update_destroy_view=TaskRetrieveUpdateDestroyView.as_view()


def _notify_manager_of_completion(task):
    """
    Tell the assignee's team manager that a task was completed.
    Skipped when the manager is the one who completed it.
    """
    assignee = task.assigned_to
    if assignee is None:
        return None

    team = Team.objects.filter(members=assignee).order_by('created_at', 'id').first()
    if team is None or team.manager_id == assignee.pk:
        return None

    notification = Notification.objects.create(
        user_id=team.manager_id,
        type=Notification.Type.TASK_COMPLETED,
        title='Task Completed',
        message=f'{assignee.display_name} completed task: "{task.title}"',
        task=task,
        project=task.project,
    )
    logger.info(f"Notification {notification.pk} created for manager {team.manager_id}")
    return notification


class TaskStatusUpdateView(APIView):
    """
    PATCH: Move a task through its lifecycle.

    - in-progress: stamps started_at
    - done: stamps completed_at, derives real_hours (1 decimal) from
      started_at, notifies the team manager and refreshes the assignee's
      burnout score in the background
    """
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, pk):
        serializer = TaskStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data['status']

        visible = get_object_or_404(visible_tasks(request.user), pk=pk)

        with transaction.atomic():
            task = Task.objects.select_for_update().select_related('assigned_to', 'project').get(pk=visible.pk)
            task.status = new_status
            update_fields = ['status', 'updated_at']

            now = timezone.now()
            if new_status == TaskStatus.IN_PROGRESS:
                task.started_at = now
                update_fields.append('started_at')
            elif new_status == TaskStatus.DONE:
                task.completed_at = now
                update_fields.append('completed_at')
                if task.started_at:
                    hours = (now - task.started_at).total_seconds() / 3600.0
                    task.real_hours = round(hours, 1)
                    update_fields.append('real_hours')

            task.save(update_fields=update_fields)

            if new_status == TaskStatus.DONE:
                try:
                    _notify_manager_of_completion(task)
                except Exception as e:
                    # The status change stands even if the notification fails
                    logger.exception(f"Failed to create completion notification for Task {task.pk}: {e}")

                if task.assigned_to_id:
                    user_id = task.assigned_to_id

                    def warm_burnout_cache():
                        from .ai_engine.celery_tasks import refresh_burnout_score
                        try:
                            refresh_burnout_score.delay(user_id)
                        except Exception as e:
                            logger.exception(f"Failed to enqueue burnout refresh for user {user_id}: {e}")

                    transaction.on_commit(warm_burnout_cache)

        logger.info(f"Task {task.pk} moved to {new_status} by user {request.user.pk}")
        return Response(TaskSerializer(task).data)

task_status_update_view=TaskStatusUpdateView.as_view()


class SmartSortView(APIView):
    """
    POST {userId}: recommended order for the user's open tasks.

    Always answers 200 once userId is present; AI failures degrade to the
    deterministic fallback ordering.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = SmartSortRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = TaskPrioritizer().prioritize(serializer.validated_data['userId'])
        return Response(result, status=status.HTTP_200_OK)

smart_sort_view=SmartSortView.as_view()
