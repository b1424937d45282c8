# notifications/tests.py
"""
Notifications App Test Suite
============================

Tests for the in-app notification endpoints. Every endpoint is scoped to
the authenticated user.
"""

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from .models import Notification

User = get_user_model()


class NotificationAPITest(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            username='manager',
            email='manager@example.com',
            password='testpass123'
        )
        self.other = User.objects.create_user(
            username='other',
            email='other@example.com',
            password='testpass123'
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.url = '/api/v1/notifications/'

    def notify(self, user=None, is_read=False, title='Task Completed'):
        return Notification.objects.create(
            user=user or self.user,
            type=Notification.Type.TASK_COMPLETED,
            title=title,
            message='Dana completed task: "Ship release"',
            is_read=is_read,
        )

    def test_list_returns_own_notifications_newest_first(self):
        older = self.notify(title='older')
        newer = self.notify(title='newer')
        self.notify(user=self.other)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([n['id'] for n in response.data], [newer.pk, older.pk])

    def test_list_is_capped_at_fifty(self):
        for i in range(55):
            self.notify(title=f'n{i}')

        response = self.client.get(self.url)

        self.assertEqual(len(response.data), 50)

    def test_unread_count(self):
        self.notify()
        self.notify()
        self.notify(is_read=True)
        self.notify(user=self.other)

        response = self.client.get(f'{self.url}unread-count/')

        self.assertEqual(response.data, {'count': 2})

    def test_mark_read(self):
        notification = self.notify()

        response = self.client.patch(f'{self.url}{notification.pk}/read/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_read'])
        notification.refresh_from_db()
        self.assertTrue(notification.is_read)

    def test_cannot_touch_other_users_notification(self):
        foreign = self.notify(user=self.other)

        self.assertEqual(
            self.client.patch(f'{self.url}{foreign.pk}/read/').status_code,
            status.HTTP_404_NOT_FOUND,
        )
        self.assertEqual(
            self.client.delete(f'{self.url}{foreign.pk}/').status_code,
            status.HTTP_404_NOT_FOUND,
        )

    def test_mark_all_read(self):
        self.notify()
        self.notify()
        foreign = self.notify(user=self.other)

        response = self.client.patch(f'{self.url}mark-all-read/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Notification.objects.filter(user=self.user, is_read=False).exists())
        foreign.refresh_from_db()
        self.assertFalse(foreign.is_read)

    def test_delete(self):
        notification = self.notify()

        response = self.client.delete(f'{self.url}{notification.pk}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Notification deleted successfully')
        self.assertFalse(Notification.objects.filter(pk=notification.pk).exists())

    def test_clear_read(self):
        self.notify(is_read=True)
        self.notify(is_read=True)
        unread = self.notify()
        self.notify(user=self.other, is_read=True)

        response = self.client.delete(f'{self.url}clear-read/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['deletedCount'], 2)
        self.assertEqual(list(Notification.objects.filter(user=self.user)), [unread])
        self.assertEqual(Notification.objects.filter(user=self.other).count(), 1)
