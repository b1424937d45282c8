from django.urls import path
from .views import (
    notification_list_view, unread_count_view, mark_read_view,
    mark_all_read_view, notification_delete_view, clear_read_view,
)

urlpatterns = [
    path('', notification_list_view, name='notification-list'),
    path('unread-count/', unread_count_view, name='notification-unread-count'),
    path('mark-all-read/', mark_all_read_view, name='notification-mark-all-read'),
    path('clear-read/', clear_read_view, name='notification-clear-read'),
    path('<int:pk>/read/', mark_read_view, name='notification-mark-read'),
    path('<int:pk>/', notification_delete_view, name='notification-delete'),
]
