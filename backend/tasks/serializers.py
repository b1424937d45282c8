# tasks/serializers.py

from rest_framework import serializers
from .models import Task, TaskStatus
import logging

logger = logging.getLogger(__name__)


class TaskStatusField(serializers.CharField):
    """Accepts the legacy "todo" spelling and stores the canonical value."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        try:
            return TaskStatus.normalize(value)
        except ValueError:
            raise serializers.ValidationError(
                f"Invalid status. Expected one of: {', '.join(TaskStatus.values)}."
            )


class TaskSerializer(serializers.ModelSerializer):
    status = TaskStatusField(required=False, default=TaskStatus.TODO)
    project_name = serializers.ReadOnlyField(source='project.name')
    effective_due_date = serializers.DateTimeField(read_only=True)

    class Meta:
        model = Task
        # explicit whitelist: user-truth fields + lifecycle fields set by the status endpoint
        fields = [
            'id', 'project', 'project_name', 'assigned_to', 'created_by',
            'title', 'description', 'status', 'priority',
            'estimate_hours', 'real_hours', 'due_date', 'effective_due_date',
            'started_at', 'completed_at', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'created_by', 'started_at', 'completed_at',
            'created_at', 'updated_at'
        ]

    def validate_estimate_hours(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("estimate_hours cannot be negative.")
        return value

    def create(self, validated_data):
        user = self.context['request'].user
        if not user or not user.is_authenticated:
            raise serializers.ValidationError("Authentication required to create a task.")

        task = Task.objects.create(created_by=user, **validated_data)
        logger.info(f"Task {task.pk} created by user {user.pk} in project {task.project_id}")
        return task


class TaskStatusUpdateSerializer(serializers.Serializer):
    status = TaskStatusField()


class SmartSortRequestSerializer(serializers.Serializer):
    userId = serializers.IntegerField(
        error_messages={'required': 'userId is required'}
    )
