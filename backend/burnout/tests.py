# burnout/tests.py
"""
Burnout App Test Suite
======================

Tests for the burnout API endpoints.

Test Categories:
----------------
1. Score Endpoint Tests - validation, caching, forceRefresh
2. Score CRUD Tests - explicit create/update/delete path
3. Team Endpoint Tests - team summary and daily hours
"""

import datetime
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from tasks.ai_engine.oracle import ScoringOracle
from tasks.models import TaskStatus
from tasks.tests.helpers import (
    FakeProvider,
    burnout_json,
    create_test_project,
    create_test_task,
    create_test_team,
)
from .models import BurnoutScore

User = get_user_model()


def fake_oracle(*script):
    """Oracle whose single burnout candidate replays `script`."""
    provider = FakeProvider({"model-a": list(script)} if script else None)
    return ScoringOracle(
        provider=provider,
        burnout_models=["model-a"],
        prioritizer_models=["model-a"],
        sleep=lambda seconds: None,
    )


class BurnoutAPITestBase(APITestCase):

    def setUp(self):
        self.manager = User.objects.create_user(
            username='manager',
            email='manager@example.com',
            password='testpass123',
            role='manager',
        )
        self.dev = User.objects.create_user(
            username='dev',
            email='dev@example.com',
            password='testpass123',
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.manager)
        self.url = '/api/v1/burnout/'


# ===========================================================================
# SCORE ENDPOINT TESTS
# ===========================================================================

class BurnoutScoreAPITest(BurnoutAPITestBase):

    def test_missing_user_id_returns_400(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('userId', response.data)

    def test_unknown_user_returns_404(self):
        response = self.client.get(self.url, {'userId': 99999})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unknown_project_returns_404(self):
        response = self.client.get(self.url, {'userId': self.dev.pk, 'projectId': 99999})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_computes_then_reuses_score(self):
        """First GET computes and stores; the second returns the same row."""
        with patch('tasks.ai_engine.orchestrator.ScoringOracle', return_value=fake_oracle(burnout_json(score=71))):
            first = self.client.get(self.url, {'userId': self.dev.pk})
            second = self.client.get(self.url, {'userId': self.dev.pk})

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data['score'], 71)
        self.assertEqual(first.data['riskLevel'], 'high')
        self.assertEqual(first.data['modelUsed'], 'model-a')
        self.assertEqual(first.data['userId'], self.dev.pk)
        self.assertIsNone(first.data['projectId'])
        self.assertEqual(second.data['id'], first.data['id'])
        self.assertEqual(BurnoutScore.objects.count(), 1)

    def test_force_refresh_creates_new_row(self):
        with patch('tasks.ai_engine.orchestrator.ScoringOracle', return_value=fake_oracle(burnout_json(score=20))):
            first = self.client.get(self.url, {'userId': self.dev.pk})
            second = self.client.get(self.url, {'userId': self.dev.pk, 'forceRefresh': 'true'})

        self.assertNotEqual(second.data['id'], first.data['id'])
        self.assertEqual(BurnoutScore.objects.count(), 2)

    def test_ai_outage_degrades_to_fallback(self):
        """All models failing still answers 200 with the heuristic score."""
        with patch('tasks.ai_engine.orchestrator.ScoringOracle', return_value=fake_oracle()):
            response = self.client.get(self.url, {'userId': self.dev.pk})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['modelUsed'], 'fallback')
        self.assertEqual(response.data['score'], 0)
        self.assertEqual(response.data['riskLevel'], 'low')


# ===========================================================================
# SCORE CRUD TESTS
# ===========================================================================

class BurnoutScoreCRUDAPITest(BurnoutAPITestBase):

    def test_post_creates_score_with_derived_risk(self):
        response = self.client.post(self.url, {
            'userId': self.dev.pk,
            'score': 55,
            'analysis': 'Manual review',
            'recommendations': ['Rebalance sprint'],
            'modelUsed': 'manual',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['riskLevel'], 'medium')
        record = BurnoutScore.objects.get(pk=response.data['id'])
        self.assertEqual(record.user, self.dev)
        self.assertEqual(record.recommendations, ['Rebalance sprint'])

    def test_post_rejects_out_of_range_score(self):
        response = self.client.post(self.url, {'userId': self.dev.pk, 'score': 101}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_update_and_delete(self):
        record = BurnoutScore.objects.create(user=self.dev, score=30, risk_level='low')
        detail_url = f'{self.url}{record.pk}/'

        response = self.client.get(detail_url)
        self.assertEqual(response.data['score'], 30)

        response = self.client.patch(detail_url, {'score': 75}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['riskLevel'], 'high')

        response = self.client.delete(detail_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Burnout score deleted successfully')
        self.assertFalse(BurnoutScore.objects.exists())

    def test_missing_score_returns_404(self):
        response = self.client.get(f'{self.url}99999/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


# ===========================================================================
# TEAM ENDPOINT TESTS
# ===========================================================================

class TeamBurnoutAPITest(BurnoutAPITestBase):

    def test_manager_without_teams_returns_404(self):
        response = self.client.get(f'{self.url}team/{self.manager.pk}/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_team_summary(self):
        create_test_team(self.manager, [self.dev])

        with patch('tasks.ai_engine.orchestrator.ScoringOracle', return_value=fake_oracle(burnout_json(score=40))):
            response = self.client.get(f'{self.url}team/{self.manager.pk}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['teamSize'], 1)
        self.assertEqual(response.data['averageScore'], 40)
        self.assertEqual(response.data['riskDistribution'], {'high': 0, 'medium': 1, 'low': 0})
        self.assertEqual(response.data['members'][0]['userId'], self.dev.pk)

    def test_daily_hours(self):
        team = create_test_team(self.manager, [self.dev])
        project = create_test_project(team)
        completed_at = timezone.now()
        create_test_task(
            project, self.dev, status=TaskStatus.DONE,
            started_at=completed_at - datetime.timedelta(hours=1, minutes=30),
            completed_at=completed_at,
        )

        response = self.client.get(f'{self.url}team/{self.manager.pk}/hours/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['dailyHours']), 28)
        today = response.data['dailyHours'][-1]
        self.assertEqual(today['date'], completed_at.astimezone(datetime.timezone.utc).date().isoformat())
        self.assertEqual(today['hours'], 1.5)

    def test_daily_hours_without_teams_returns_404(self):
        response = self.client.get(f'{self.url}team/{self.dev.pk}/hours/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
