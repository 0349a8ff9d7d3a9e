"""
BILLING App - CSV consignments, invoices, bills and party payments

Handles: Imported CSV consignment rows, Invoices with line items, Bills built
from bookings, Party payments allocated to invoices
"""

import random
import time
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


def generate_invoice_number():
    """INV-YYYYMMDD-<6 random digits>"""
    return f"INV-{timezone.localdate():%Y%m%d}-{random.randint(0, 999999):06d}"


def generate_party_invoice_number():
    """PI-YYYYMMDD-<last 6 digits of the unix time in ms>"""
    millis = str(int(time.time() * 1000))
    return f"PI-{timezone.localdate():%Y%m%d}-{millis[-6:]}"


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PARTIAL = 'partial', 'Partially paid'
    PAID = 'paid', 'Paid'
    OVERDUE = 'overdue', 'Overdue'


class BillStatus(models.TextChoices):
    GENERATED = 'generated', 'Generated'
    SENT = 'sent', 'Sent'
    CANCELLED = 'cancelled', 'Cancelled'


class BookingType(models.TextChoices):
    ACCOUNT = 'account', 'Account'
    CASH = 'cash', 'Cash'


# Bill.bill_type of bills covering every booking of a party in a date range
PERIOD_BILL_TYPE = 'period'


# ===========================================
# CSV CONSIGNMENTS
# ===========================================

class CsvInvoiceQuerySet(models.QuerySet):

    def unbilled(self):
        return self.filter(invoice__isnull=True)

    def for_sender(self, name):
        return self.filter(sender_name__iexact=(name or '').strip())


class CsvInvoice(models.Model):
    """
    One consignment line imported from a carrier CSV.

    `pricing_meta['rate_breakup']` holds the applied slab breakup;
    `invoice` is set once the row has been billed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    booking_date = models.DateField(null=True, blank=True)
    booking_reference = models.CharField(max_length=255, unique=True, null=True, blank=True)
    consignment_no = models.CharField(max_length=255, unique=True, null=True, blank=True)
    mode = models.CharField(max_length=100, null=True, blank=True)
    service_type = models.CharField(max_length=100, null=True, blank=True)
    weight = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    prepaid_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    final_collected = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    retail_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    sender_name = models.CharField(max_length=255, null=True, blank=True)
    sender_phone = models.CharField(max_length=50, null=True, blank=True)
    sender_address = models.TextField(null=True, blank=True)
    recipient_name = models.CharField(max_length=255, null=True, blank=True)
    recipient_phone = models.CharField(max_length=50, null=True, blank=True)
    recipient_address = models.TextField(null=True, blank=True)

    booking_mode = models.CharField(max_length=100, null=True, blank=True)
    shipment_type = models.CharField(max_length=100, null=True, blank=True)
    risk_surcharge_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    risk_surcharge_type = models.CharField(max_length=100, null=True, blank=True)
    contents = models.TextField(null=True, blank=True)
    declared_value = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    eway_bill = models.CharField(max_length=100, null=True, blank=True)
    gst_invoice = models.CharField(max_length=100, null=True, blank=True)
    customer = models.CharField(max_length=255, null=True, blank=True)
    service_code = models.CharField(max_length=100, null=True, blank=True)
    region = models.CharField(max_length=255, null=True, blank=True)
    payment_mode = models.CharField(max_length=100, null=True, blank=True)
    chargeable_weight = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    payment_utr = models.CharField(max_length=255, null=True, blank=True)
    employee_code = models.CharField(max_length=100, null=True, blank=True)
    employee_discount_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    employee_discount_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    promocode = models.CharField(max_length=100, null=True, blank=True)
    promocode_discount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    packing_material = models.CharField(max_length=255, null=True, blank=True)
    no_of_stretch_films = models.IntegerField(null=True, blank=True)

    calculated_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    pricing_meta = models.JSONField(null=True, blank=True)

    invoice = models.ForeignKey(
        'billing.Invoice',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='csv_rows'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CsvInvoiceQuerySet.as_manager()

    class Meta:
        verbose_name = "CSV consignment"
        verbose_name_plural = "CSV consignments"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['sender_name'], name='csv_sender_idx'),
            models.Index(fields=['booking_date'], name='csv_booking_date_idx'),
        ]

    def __str__(self):
        return self.consignment_no or self.booking_reference or str(self.id)

    @property
    def rate_breakup(self) -> dict:
        return (self.pricing_meta or {}).get('rate_breakup') or {}

    @property
    def is_billed(self) -> bool:
        return self.invoice_id is not None


# ===========================================
# INVOICES
# ===========================================

class Invoice(models.Model):
    """
    Party invoice.

    total_amount = subtotal + tax_amount + additional_charges
                   (+ slab_amount when apply_slab)
    """

    invoice_number = models.CharField(max_length=50, unique=True, default=generate_invoice_number)
    party = models.ForeignKey('parties.Party', on_delete=models.PROTECT, related_name='invoices')
    invoice_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    additional_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    received_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    notes = models.TextField(blank=True)

    apply_slab = models.BooleanField(default=False)
    slab_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    slab_breakdown = models.JSONField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['invoice_date'], name='invoice_date_idx'),
            models.Index(fields=['party', 'payment_status'], name='invoice_party_status_idx'),
        ]

    def __str__(self):
        return f"{self.invoice_number} - {self.party}"

    @property
    def balance(self) -> Decimal:
        return max(self.total_amount - self.received_amount, Decimal('0.00'))

    def compute_total(self) -> Decimal:
        slab = self.slab_amount if self.apply_slab else Decimal('0.00')
        return (self.subtotal or 0) + (self.tax_amount or 0) + (self.additional_charges or 0) + (slab or 0)

    def derive_payment_status(self) -> str:
        if self.total_amount > 0 and self.received_amount >= self.total_amount:
            return PaymentStatus.PAID
        if self.received_amount > 0:
            return PaymentStatus.PARTIAL
        if self.payment_status == PaymentStatus.OVERDUE:
            return PaymentStatus.OVERDUE
        return PaymentStatus.PENDING


class InvoiceItem(models.Model):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    description = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('1'))
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    booking_date = models.DateField(null=True, blank=True)
    consignment_no = models.CharField(max_length=255, blank=True)
    shipment_type = models.CharField(max_length=100, blank=True)
    service_type = models.CharField(max_length=100, blank=True)
    weight = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.description


# ===========================================
# BILLS
# ===========================================

class Bill(models.Model):
    """Bill generated for a party from selected account/cash bookings."""

    party = models.ForeignKey('parties.Party', on_delete=models.PROTECT, related_name='bills')
    bill_number = models.CharField(max_length=50)
    bill_date = models.DateField(default=timezone.localdate)
    bill_type = models.CharField(max_length=30, blank=True)

    base_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    service_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    fuel_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    other_charges = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    cgst_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    sgst_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    igst_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)

    template = models.CharField(max_length=50, default='Default')
    email_sent = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=BillStatus.choices, default=BillStatus.GENERATED)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.bill_number} - {self.party}"


class BillBooking(models.Model):
    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name='bookings')
    booking_type = models.CharField(max_length=20, choices=BookingType.choices)
    booking_id = models.PositiveIntegerField()

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.bill.bill_number}: {self.booking_type} #{self.booking_id}"


# ===========================================
# PARTY PAYMENTS
# ===========================================

class PartyPayment(models.Model):
    """Money received from a party, optionally allocated to invoices."""

    party = models.ForeignKey('parties.Party', on_delete=models.PROTECT, related_name='payments')
    payment_date = models.DateField()
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    tds_deduct = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    payment_method = models.CharField(max_length=50, blank=True)
    reference_no = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-payment_date', '-id']

    def __str__(self):
        return f"{self.party} - {self.amount} ({self.payment_date})"


class PaymentAllocation(models.Model):
    party_payment = models.ForeignKey(PartyPayment, on_delete=models.CASCADE, related_name='allocations')
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='allocations')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.invoice.invoice_number}: {self.amount}"
