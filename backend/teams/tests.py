# teams/tests.py
"""
Teams App Test Suite
====================

Tests for team and project endpoints.
"""

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from .models import Project, Team

User = get_user_model()


class TeamAPITest(APITestCase):

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
            password='testpass123'
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.manager)
        self.url = '/api/v1/teams/'

    def test_creator_becomes_manager(self):
        response = self.client.post(self.url, {'name': 'Platform', 'members': [self.dev.pk]}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        team = Team.objects.get(pk=response.data['id'])
        self.assertEqual(team.manager, self.manager)
        self.assertEqual(list(team.members.all()), [self.dev])

    def test_members_see_team_but_cannot_edit(self):
        team = Team.objects.create(name='Platform', manager=self.manager)
        team.members.add(self.dev)
        self.client.force_authenticate(user=self.dev)

        listed = self.client.get(self.url)
        self.assertEqual([t['id'] for t in listed.data], [team.pk])

        response = self.client.patch(f'{self.url}{team.pk}/', {'name': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_project_crud_scoped_to_team(self):
        team = Team.objects.create(name='Platform', manager=self.manager)
        outsider = User.objects.create_user(
            username='outsider',
            email='outsider@example.com',
            password='testpass123'
        )

        response = self.client.post(f'{self.url}projects/', {
            'name': 'Dashboard',
            'team': team.pk,
            'github_link': 'https://github.com/acme/dashboard',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        project = Project.objects.get(pk=response.data['id'])
        self.assertEqual(project.status, Project.Status.ACTIVE)

        self.client.force_authenticate(user=outsider)
        response = self.client.get(f'{self.url}projects/{project.pk}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
