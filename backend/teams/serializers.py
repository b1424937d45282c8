# teams/serializers.py

from django.contrib.auth import get_user_model
from rest_framework import serializers
from .models import Team, Project

User = get_user_model()


class TeamSerializer(serializers.ModelSerializer):
    # Manager email read-only for display purposes
    manager_email = serializers.ReadOnlyField(source='manager.email')
    members = serializers.PrimaryKeyRelatedField(
        many=True, queryset=User.objects.all(), required=False
    )

    class Meta:
        model = Team
        fields = (
            'id', 'name', 'manager', 'manager_email', 'members',
            'created_at', 'updated_at'
        )
        read_only_fields = ('id', 'manager', 'created_at', 'updated_at')

    # The creator of a team is its manager.
    def create(self, validated_data):
        user = self.context['request'].user
        if not user.is_authenticated:
            raise serializers.ValidationError("Authentication required to create a team.")

        validated_data['manager'] = user
        return super().create(validated_data)


class ProjectSerializer(serializers.ModelSerializer):
    members = serializers.PrimaryKeyRelatedField(
        many=True, queryset=User.objects.all(), required=False
    )

    class Meta:
        model = Project
        fields = (
            'id', 'name', 'description', 'github_link', 'team', 'members',
            'status', 'created_at', 'updated_at'
        )
        read_only_fields = ('id', 'created_at', 'updated_at')
