"""
Django Admin configuration for BOOKINGS app.
"""

from django.contrib import admin

from .models import CashBooking, AccountBooking


@admin.register(CashBooking)
class CashBookingAdmin(admin.ModelAdmin):
    list_display = ('date', 'reference_number', 'sender', 'receiver', 'center', 'gross_amount', 'gross_amount_source', 'net_amount')
    list_filter = ('gross_amount_source', 'carrier', 'date')
    search_fields = ('sender', 'receiver', 'reference_number')
    date_hierarchy = 'date'
    readonly_fields = ('created_by', 'created_at', 'updated_at')


@admin.register(AccountBooking)
class AccountBookingAdmin(admin.ModelAdmin):
    list_display = ('booking_date', 'reference_number', 'consignment_number', 'sender', 'receiver', 'net_amount', 'status')
    list_filter = ('status', 'gross_amount_source', 'carrier')
    search_fields = ('sender', 'receiver', 'reference_number', 'consignment_number')
    date_hierarchy = 'booking_date'
    readonly_fields = ('created_by', 'created_at', 'updated_at')
