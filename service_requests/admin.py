from django.contrib import admin
from .models import ServiceRequest, RequestItem


class RequestItemInline(admin.TabularInline):
    model = RequestItem
    extra = 0


@admin.register(ServiceRequest)
class ServiceRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'client', 'event_date', 'event_location', 'status', 'awarded_vendor', 'created_at']
    list_filter = ['status', 'items__category']
    search_fields = ['client__full_name', 'event_location', 'notes']
    inlines = [RequestItemInline]
