# burnout/serializers.py

from django.contrib.auth import get_user_model
from rest_framework import serializers

from teams.models import Project
from tasks.ai_engine.rules import risk_level_for
from .models import BurnoutScore

User = get_user_model()


class BurnoutScoreSerializer(serializers.ModelSerializer):
    """
    camelCase representation shared by the scoring endpoint and the CRUD
    endpoints. riskLevel always follows the score when a score is written.
    """
    userId = serializers.PrimaryKeyRelatedField(source='user', queryset=User.objects.all())
    projectId = serializers.PrimaryKeyRelatedField(
        source='project', queryset=Project.objects.all(), required=False, allow_null=True
    )
    riskLevel = serializers.CharField(source='risk_level', read_only=True)
    modelUsed = serializers.CharField(source='model_used', required=False, allow_blank=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = BurnoutScore
        fields = (
            'id', 'userId', 'projectId', 'score', 'riskLevel', 'week', 'year',
            'factors', 'analysis', 'recommendations', 'modelUsed',
            'createdAt', 'updatedAt'
        )
        read_only_fields = ('id',)

    def validate_recommendations(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("recommendations must be a list.")
        return [str(item) for item in value]

    def validate(self, attrs):
        if 'score' in attrs:
            attrs['risk_level'] = risk_level_for(attrs['score'])
        return attrs
