from django.contrib import admin
from .models import ServiceCategory, Service


@admin.register(ServiceCategory)
class ServiceCategoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name']
    search_fields = ['name']


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'vendor', 'category', 'price', 'price_unit', 'is_available', 'created_at']
    list_filter = ['is_available', 'category', 'price_unit']
    search_fields = ['title', 'description', 'vendor__full_name']
