from django.contrib import admin
from .models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ['id', 'full_name', 'email', 'phone', 'role', 'created_at']
    list_filter = ['role']
    search_fields = ['full_name', 'email']
