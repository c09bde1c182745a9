from django.urls import path
from . import views


urlpatterns = [
    path('api/v1/requests/<int:request_id>/bids', views.request_bids),
    path('api/v1/bids/<int:id>/award', views.award_bid),
    path('api/v1/bids/<int:id>/withdraw', views.withdraw_bid),
    path('api/v1/vendor/bids', views.vendor_bids),
]
