"""
Django Admin configuration for CORE app.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, Company


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Custom admin for User model with email-based auth."""

    list_display = ('email', 'full_name', 'role', 'is_active', 'date_joined')
    list_filter = ('role', 'is_active', 'is_staff')
    search_fields = ('email', 'full_name', 'phone_number')
    ordering = ('-date_joined',)

    fieldsets = (
        (None, {
            'fields': ('email', 'password')
        }),
        ('Profile', {
            'fields': ('full_name', 'phone_number', 'role')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',)
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'role', 'password1', 'password2'),
        }),
    )

    readonly_fields = ('date_joined',)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ('business_name', 'gstin', 'state', 'is_active', 'updated_at')
    list_filter = ('is_active', 'state')
    search_fields = ('business_name', 'gstin', 'email_id')
    fieldsets = (
        ('Business', {
            'fields': ('business_name', 'business_type', 'business_category', 'gstin', 'is_active')
        }),
        ('Contact', {
            'fields': ('phone_number', 'email_id', 'business_address', 'state', 'pincode')
        }),
        ('Branding', {
            'fields': ('logo', 'signature'),
            'classes': ('collapse',)
        }),
    )
