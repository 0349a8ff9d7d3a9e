"""
Django Admin configuration for PARTIES app.
"""

from django.contrib import admin

from .models import Party


@admin.register(Party)
class PartyAdmin(admin.ModelAdmin):
    list_display = ('party_name', 'contact_person', 'phone', 'city', 'gst_type', 'gst_number', 'is_active')
    list_filter = ('gst_type', 'is_active', 'state')
    search_fields = ('party_name', 'contact_person', 'phone', 'gst_number')
    ordering = ('party_name',)

    fieldsets = (
        ('Party', {
            'fields': ('party_name', 'contact_person', 'phone', 'email', 'is_active')
        }),
        ('Billing address', {
            'fields': ('address', 'city', 'state', 'pincode')
        }),
        ('Tax', {
            'fields': ('gst_type', 'gst_number', 'pan_number')
        }),
        ('Shipping address', {
            'classes': ('collapse',),
            'fields': ('shipping_address', 'shipping_city', 'shipping_state', 'shipping_pincode')
        }),
    )
