from django.urls import path
from .views import CustomLoginView, UserProfileView

urlpatterns = [
    path('auth/login/', CustomLoginView.as_view(), name='login'),
    path('auth/profile/', UserProfileView.as_view(), name='user-profile'),
]
