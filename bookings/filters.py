"""
Bookings App Filters
"""

import django_filters

from .models import CashBooking, AccountBooking


class CashBookingFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    sender = django_filters.CharFilter(field_name='sender', lookup_expr='iexact')

    class Meta:
        model = CashBooking
        fields = ['center', 'carrier', 'package_type', 'gross_amount_source']


class AccountBookingFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='booking_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='booking_date', lookup_expr='lte')
    sender = django_filters.CharFilter(field_name='sender', lookup_expr='iexact')

    class Meta:
        model = AccountBooking
        fields = ['center', 'carrier', 'package_type', 'status', 'gross_amount_source']
