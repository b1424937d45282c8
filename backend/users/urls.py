from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .serializers import CustomTokenObtainPairSerializer
from .views import register_api_view, user_detail_view

login_view = TokenObtainPairView.as_view(serializer_class=CustomTokenObtainPairSerializer)

urlpatterns = [
    path('register/', register_api_view, name='auth-register'),
    # JWT pair from email + password
    path('login/', login_view, name='auth-login'),
    path('token/refresh/', TokenRefreshView.as_view(), name='auth-token-refresh'),
    path('user/', user_detail_view, name='auth-user'),
]
