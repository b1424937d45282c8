from django.urls import path
from .views import list_create_view
from .views import retreive_update_destroy_view
from .views import task_status_update_view
from .views import smart_sort_view

urlpatterns=[
    # GET and POST (List tasks and Create new task)
    path('',list_create_view,name="task-list-create"),

    # POST {userId} (AI-ordered open tasks)
    path('smart-sort/',smart_sort_view,name="task-smart-sort"),

    # GET, PUT, PATCH, DELETE (Detail and Manipulation)
    path('<int:pk>/',retreive_update_destroy_view,name="task-detail"),

    # PATCH {status} (Lifecycle transition)
    path('<int:pk>/status/',task_status_update_view,name="task-status"),
]
