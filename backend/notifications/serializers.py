from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    task_title = serializers.ReadOnlyField(source='task.title')
    project_name = serializers.ReadOnlyField(source='project.name')

    class Meta:
        model = Notification
        fields = (
            'id', 'type', 'title', 'message', 'task', 'task_title',
            'project', 'project_name', 'is_read', 'created_at'
        )
        read_only_fields = fields
