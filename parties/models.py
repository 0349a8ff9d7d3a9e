"""
PARTIES App - Customer (party) master

A party is the billed customer. CSV consignments and bookings refer to it
by name only, so lookups are case-insensitive on the trimmed party_name.
"""

from django.db import models
from django.db.models.functions import Lower, Trim


class GstType(models.TextChoices):
    """GST registration classification."""
    UNREGISTERED = 'unregistered', 'Unregistered'
    CONSUMER = 'consumer', 'Consumer'
    REGISTERED = 'registered', 'Registered Business - Regular'
    COMPOSITION = 'composition', 'Registered Business - Composition'
    OVERSEAS = 'overseas', 'Overseas'


class PartyQuerySet(models.QuerySet):

    def by_name(self, name):
        """Parties whose trimmed name matches `name` case-insensitively."""
        normalized = (name or '').strip().lower()
        if not normalized:
            return self.none()
        return self.annotate(
            _normalized_name=Lower(Trim('party_name'))
        ).filter(_normalized_name=normalized)

    def find_by_name(self, name):
        return self.by_name(name).order_by('id').first()


class Party(models.Model):
    """
    Customer profile with billing and GST details.
    """

    party_name = models.CharField(max_length=255, verbose_name="Party name")
    contact_person = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)

    # Billing address
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    pincode = models.CharField(max_length=10, blank=True)

    # Tax
    gst_number = models.CharField(max_length=15, blank=True, verbose_name="GSTIN")
    gst_type = models.CharField(
        max_length=20,
        choices=GstType.choices,
        default=GstType.UNREGISTERED,
        verbose_name="GST type"
    )
    pan_number = models.CharField(max_length=10, blank=True, verbose_name="PAN")

    # Shipping address
    shipping_address = models.TextField(blank=True)
    shipping_city = models.CharField(max_length=100, blank=True)
    shipping_state = models.CharField(max_length=100, blank=True)
    shipping_pincode = models.CharField(max_length=10, blank=True)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PartyQuerySet.as_manager()

    class Meta:
        verbose_name = "Party"
        verbose_name_plural = "Parties"
        ordering = ['party_name']
        indexes = [
            models.Index(fields=['party_name'], name='party_name_idx'),
        ]

    def __str__(self):
        return self.party_name

    @property
    def full_address(self) -> str:
        parts = [self.address, self.city, self.state, self.pincode]
        return ', '.join(p for p in parts if p)
