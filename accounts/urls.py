from django.urls import path
from . import views


urlpatterns = [
    path('api/v1/auth/register', views.register),
    path('api/v1/auth/login', views.login),
    path('api/v1/auth/logout', views.logout),
    path('api/v1/users/me', views.me),
]
