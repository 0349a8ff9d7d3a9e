"""
Billing App Filters
"""

import django_filters

from .models import CsvInvoice, Invoice, Bill


class InvoiceFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='invoice_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='invoice_date', lookup_expr='lte')
    party_id = django_filters.NumberFilter(field_name='party_id')

    class Meta:
        model = Invoice
        fields = ['payment_status', 'apply_slab']


class CsvInvoiceFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='booking_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='booking_date', lookup_expr='lte')
    sender = django_filters.CharFilter(field_name='sender_name', lookup_expr='iexact')
    billed = django_filters.BooleanFilter(method='filter_billed')
    priced = django_filters.BooleanFilter(field_name='calculated_amount', lookup_expr='isnull', exclude=True)

    class Meta:
        model = CsvInvoice
        fields = ['mode', 'service_type', 'region', 'invoice']

    def filter_billed(self, queryset, name, value):
        return queryset.filter(invoice__isnull=not value)


class BillFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='bill_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='bill_date', lookup_expr='lte')
    party_id = django_filters.NumberFilter(field_name='party_id')

    class Meta:
        model = Bill
        fields = ['status']
