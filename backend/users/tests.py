# users/tests.py
"""
Users App Test Suite
====================

Tests for registration, email-based JWT login and the profile endpoint.
"""

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

User = get_user_model()

STRONG_PASSWORD = 'c0rrect-Horse-battery'


class CustomUserModelTest(TestCase):

    def test_username_defaults_to_email(self):
        user = User.objects.create_user(email='Dev@Example.COM', password=STRONG_PASSWORD)

        self.assertEqual(user.email, 'Dev@example.com')
        self.assertEqual(user.username, 'Dev@example.com')
        self.assertEqual(user.role, User.Role.DEVELOPER)

    def test_display_name_falls_back_to_username(self):
        user = User.objects.create_user(email='a@example.com', username='ada', password=STRONG_PASSWORD)
        self.assertEqual(user.display_name, 'ada')

        user.first_name, user.last_name = 'Ada', 'Lovelace'
        self.assertEqual(user.display_name, 'Ada Lovelace')

    def test_superuser_is_superadmin(self):
        admin = User.objects.create_superuser(email='root@example.com', password=STRONG_PASSWORD, username='root')

        self.assertEqual(admin.role, User.Role.SUPERADMIN)
        self.assertTrue(admin.is_manager)


class AuthAPITest(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = '/api/v1/auth/'

    def test_register_login_and_profile(self):
        response = self.client.post(f'{self.url}register/', {
            'email': 'dana@example.com',
            'username': 'dana',
            'password': STRONG_PASSWORD,
            'password2': STRONG_PASSWORD,
            'first_name': 'Dana',
            'role': 'manager',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data)

        response = self.client.post(f'{self.url}login/', {
            'email': 'dana@example.com',
            'password': STRONG_PASSWORD,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        response = self.client.get(f'{self.url}user/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Dana')
        self.assertEqual(response.data['role'], 'manager')

    def test_register_rejects_mismatched_passwords(self):
        response = self.client.post(f'{self.url}register/', {
            'email': 'dana@example.com',
            'username': 'dana',
            'password': STRONG_PASSWORD,
            'password2': 'something-else-entirely',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)
