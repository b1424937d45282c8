from django.urls import path,include

urlpatterns=[
    path('v1/auth/',include('users.urls')),
    path('v1/teams/',include('teams.urls')),
    path('v1/tasks/',include('tasks.urls')),
    path('v1/burnout/',include('burnout.urls')),
    path('v1/notifications/',include('notifications.urls')),
]
