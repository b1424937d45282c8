# notifications/views.py

import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Notification
from .serializers import NotificationSerializer

logger = logging.getLogger(__name__)

LIST_LIMIT = 50


class NotificationListView(generics.ListAPIView):
    """GET: the authenticated user's 50 most recent notifications."""
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return (
            Notification.objects.filter(user=self.request.user)
            .select_related('task', 'project')
            .order_by('-created_at', '-id')[:LIST_LIMIT]
        )

notification_list_view=NotificationListView.as_view()


class UnreadCountView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        count = Notification.objects.filter(user=request.user, is_read=False).count()
        return Response({'count': count})

unread_count_view=UnreadCountView.as_view()


class MarkReadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, pk):
        notification = get_object_or_404(Notification, pk=pk, user=request.user)
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=['is_read'])
        return Response(NotificationSerializer(notification).data)

mark_read_view=MarkReadView.as_view()


class MarkAllReadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request):
        updated = Notification.objects.filter(user=request.user, is_read=False).update(is_read=True)
        logger.info(f"Marked {updated} notifications read for user {request.user.pk}")
        return Response({'message': 'All notifications marked as read', 'updatedCount': updated})

mark_all_read_view=MarkAllReadView.as_view()


class NotificationDeleteView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, pk):
        notification = get_object_or_404(Notification, pk=pk, user=request.user)
        notification.delete()
        return Response({'message': 'Notification deleted successfully'}, status=status.HTTP_200_OK)

notification_delete_view=NotificationDeleteView.as_view()


class ClearReadView(APIView):
    """DELETE: remove every read notification of the authenticated user."""
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request):
        deleted, _ = Notification.objects.filter(user=request.user, is_read=True).delete()
        return Response({
            'message': 'Read notifications cleared successfully',
            'deletedCount': deleted,
        })

clear_read_view=ClearReadView.as_view()
