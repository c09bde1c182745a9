from django.urls import path
from . import views


urlpatterns = [
    path('api/v1/categories', views.categories),
    path('api/v1/services', views.browse_services),
    path('api/v1/vendor/services', views.vendor_services),
    path('api/v1/vendor/services/<int:id>', views.vendor_service_detail),
    path('api/v1/vendor/services/<int:id>/availability', views.toggle_availability),
]
