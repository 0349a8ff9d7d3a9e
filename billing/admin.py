"""
Django Admin configuration for BILLING app.
"""

import csv

from django.contrib import admin
from django.http import HttpResponse

from .models import CsvInvoice, Invoice, InvoiceItem, Bill, BillBooking, PartyPayment, PaymentAllocation
from .services.csv_import import CSV_COLUMNS, CSV_HEADERS


# ===========================================
# CSV CONSIGNMENTS ADMIN
# ===========================================

@admin.register(CsvInvoice)
class CsvInvoiceAdmin(admin.ModelAdmin):
    list_display = (
        'short_id', 'booking_date', 'consignment_no', 'sender_name',
        'region', 'weight', 'calculated_amount', 'invoice'
    )
    list_filter = ('mode', 'service_type', 'booking_date')
    search_fields = ('sender_name', 'recipient_name', 'consignment_no', 'booking_reference')
    date_hierarchy = 'booking_date'
    readonly_fields = ('id', 'calculated_amount', 'pricing_meta', 'invoice', 'created_at', 'updated_at')
    actions = ['export_rows_csv']

    def short_id(self, obj):
        return str(obj.id)[:8]
    short_id.short_description = "ID"

    @admin.action(description="📥 Export as CSV")
    def export_rows_csv(self, request, queryset):
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = 'attachment; filename="csv_consignments.csv"'
        response.write('\ufeff')

        writer = csv.writer(response)
        writer.writerow(CSV_HEADERS + ['CALCULATED AMOUNT'])
        for row in queryset:
            values = ['' if getattr(row, field) is None else getattr(row, field) for _, field, _ in CSV_COLUMNS]
            writer.writerow(values + [row.calculated_amount if row.calculated_amount is not None else ''])
        return response


# ===========================================
# INVOICE ADMIN
# ===========================================

class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ('total_price',)


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        'invoice_number', 'party', 'invoice_date', 'total_amount',
        'received_amount', 'payment_status'
    )
    list_filter = ('payment_status', 'apply_slab', 'invoice_date')
    search_fields = ('invoice_number', 'party__party_name')
    autocomplete_fields = ('party',)
    date_hierarchy = 'invoice_date'
    readonly_fields = ('created_by', 'created_at', 'updated_at')
    inlines = [InvoiceItemInline]
    actions = ['export_invoices_csv']

    fieldsets = (
        ('Invoice', {
            'fields': ('invoice_number', 'party', 'invoice_date', 'due_date', 'payment_status')
        }),
        ('Amounts', {
            'fields': (
                'subtotal', 'tax_amount', 'additional_charges',
                'total_amount', 'received_amount'
            )
        }),
        ('Slab', {
            'fields': ('apply_slab', 'slab_amount', 'slab_breakdown'),
            'classes': ('collapse',)
        }),
        ('Notes', {
            'fields': ('notes', 'created_by', 'created_at', 'updated_at')
        }),
    )

    @admin.action(description="📥 Export as CSV")
    def export_invoices_csv(self, request, queryset):
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = 'attachment; filename="invoices.csv"'
        response.write('\ufeff')

        writer = csv.writer(response)
        writer.writerow([
            'Invoice No', 'Party', 'Date', 'Subtotal', 'Tax', 'Additional',
            'Total', 'Received', 'Balance', 'Status'
        ])
        for invoice in queryset.select_related('party'):
            writer.writerow([
                invoice.invoice_number,
                invoice.party.party_name,
                invoice.invoice_date.strftime('%d/%m/%Y'),
                invoice.subtotal,
                invoice.tax_amount,
                invoice.additional_charges,
                invoice.total_amount,
                invoice.received_amount,
                invoice.balance,
                invoice.get_payment_status_display(),
            ])
        return response


# ===========================================
# BILL ADMIN
# ===========================================

class BillBookingInline(admin.TabularInline):
    model = BillBooking
    extra = 0


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ('bill_number', 'party', 'bill_date', 'total_amount', 'template', 'status')
    list_filter = ('status', 'template')
    search_fields = ('bill_number', 'party__party_name')
    autocomplete_fields = ('party',)
    inlines = [BillBookingInline]


# ===========================================
# PAYMENT ADMIN
# ===========================================

class PaymentAllocationInline(admin.TabularInline):
    model = PaymentAllocation
    extra = 0
    autocomplete_fields = ('invoice',)


@admin.register(PartyPayment)
class PartyPaymentAdmin(admin.ModelAdmin):
    list_display = ('party', 'payment_date', 'amount', 'tds_deduct', 'discount', 'payment_method', 'reference_no')
    list_filter = ('payment_method',)
    search_fields = ('party__party_name', 'reference_no')
    autocomplete_fields = ('party',)
    readonly_fields = ('created_by', 'created_at')
    inlines = [PaymentAllocationInline]
