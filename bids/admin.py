from django.contrib import admin
from .models import Bid


@admin.register(Bid)
class BidAdmin(admin.ModelAdmin):
    list_display = ['id', 'request', 'vendor', 'service', 'amount', 'delivery_days', 'status', 'awarded_at', 'created_at']
    list_filter = ['status']
    search_fields = ['vendor__full_name', 'message']
