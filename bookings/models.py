"""
BOOKINGS App - Cash and account consignments

Handles: Cash bookings (paid at the counter), Account bookings (billed to a
party later through bills)
"""

import time
from decimal import Decimal

from django.conf import settings
from django.db import models

from rates.services.pricing import round2


class WeightUnit(models.TextChoices):
    KG = 'kg', 'Kilograms'
    G = 'g', 'Grams'


class GrossAmountSource(models.TextChoices):
    """Where a booking's gross amount came from."""
    SLAB = 'slab', 'Slab quote'
    MANUAL = 'manual', 'Entered manually'


class AccountBookingStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    BILLED = 'billed', 'Billed'
    CANCELLED = 'cancelled', 'Cancelled'


def _money(value):
    return value if value is not None else Decimal('0.00')


def weight_in_grams(weight, unit):
    """Weight converted to whole grams; None when unknown."""
    if weight is None:
        return None
    grams = Decimal(str(weight)) if unit == WeightUnit.G else Decimal(str(weight)) * 1000
    return int(grams.to_integral_value())


def default_account_reference():
    return f"AB{int(time.time() * 1000)}"


class BookingBase(models.Model):
    """Fields shared by cash and account bookings."""

    sender = models.CharField(max_length=255)
    center = models.CharField(max_length=255, blank=True)
    receiver = models.CharField(max_length=255)
    carrier = models.CharField(max_length=255, blank=True)
    package_type = models.CharField(max_length=100, blank=True)

    weight = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    weight_unit = models.CharField(max_length=10, choices=WeightUnit.choices, default=WeightUnit.KG)
    number_of_boxes = models.PositiveIntegerField(null=True, blank=True)

    gross_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    gross_amount_source = models.CharField(
        max_length=10,
        choices=GrossAmountSource.choices,
        default=GrossAmountSource.MANUAL
    )
    insurance_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    parcel_value = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    net_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    remarks = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @property
    def weight_grams(self):
        return weight_in_grams(self.weight, self.weight_unit)

    def compute_net_amount(self) -> Decimal:
        raise NotImplementedError

    def save(self, *args, **kwargs):
        if self.net_amount is None:
            self.net_amount = self.compute_net_amount()
        super().save(*args, **kwargs)


class CashBooking(BookingBase):
    """
    Counter booking paid in cash.

    net = gross + gross * fuel% / 100 + insurance + cgst + sgst
    """

    date = models.DateField()
    sender_mobile = models.CharField(max_length=20, blank=True)
    sender_address = models.TextField(blank=True)
    receiver_mobile = models.CharField(max_length=20, blank=True)
    receiver_address = models.TextField(blank=True)
    reference_number = models.CharField(max_length=255, blank=True)

    fuel_charge_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    cgst_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    sgst_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['date'], name='cash_booking_date_idx'),
        ]

    def __str__(self):
        return f"{self.reference_number or self.pk} - {self.sender} -> {self.receiver}"

    def compute_net_amount(self) -> Decimal:
        gross = _money(self.gross_amount)
        fuel = gross * _money(self.fuel_charge_percent) / 100
        total = gross + fuel + _money(self.insurance_amount) + _money(self.cgst_amount) + _money(self.sgst_amount)
        return round2(total)


class AccountBooking(BookingBase):
    """
    Booking for a credit party, billed later.

    net = gross + other_charges + insurance
    """

    booking_date = models.DateField()
    mobile = models.CharField(max_length=20, blank=True)
    reference_number = models.CharField(max_length=255, default=default_account_reference)
    consignment_number = models.CharField(max_length=255, blank=True)
    other_charges = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=AccountBookingStatus.choices,
        default=AccountBookingStatus.PENDING
    )

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['booking_date'], name='account_booking_date_idx'),
            models.Index(fields=['sender'], name='account_booking_sender_idx'),
        ]

    def __str__(self):
        return f"{self.reference_number} - {self.sender} -> {self.receiver}"

    def compute_net_amount(self) -> Decimal:
        total = _money(self.gross_amount) + _money(self.other_charges) + _money(self.insurance_amount)
        return round2(total)
