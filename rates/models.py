"""
RATES App - Rate masters and party rate slabs

Handles: Regions, Carriers, Centers, Weight/Distance slabs, Service types,
Modes, Quotation defaults, Party rate slabs, Party quotations
"""

from decimal import Decimal
from django.conf import settings
from django.db import models


class ShipmentType(models.TextChoices):
    """Shipment classification used by party rate slabs."""
    DOCUMENT = 'DOCUMENT', 'Document'
    NON_DOCUMENT = 'NON_DOCUMENT', 'Non Document'


class DistanceCategory(models.TextChoices):
    """Distance categories derived from sender/recipient addresses."""
    METRO_CITIES = 'METRO_CITIES', 'Metro Cities'
    WITHIN_STATE = 'WITHIN_STATE', 'Within State'
    OUT_OF_STATE = 'OUT_OF_STATE', 'Out of State'
    OTHER_STATE = 'OTHER_STATE', 'Other State'


class ActiveQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)


# ===========================================
# LOCATION MASTERS
# ===========================================

class Region(models.Model):
    """Operating region grouping several centers."""

    name = models.CharField(max_length=100, unique=True)
    code = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Center(models.Model):
    """Booking center (branch) located in a region."""

    city = models.CharField(max_length=100)
    address = models.TextField(blank=True)
    region = models.ForeignKey(
        Region,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='centers'
    )
    is_active = models.BooleanField(default=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ['city']

    def __str__(self):
        return self.city


class Carrier(models.Model):
    """Courier company the consignment is handed to."""

    name = models.CharField(max_length=100, unique=True)
    code = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class MetroCity(models.Model):
    """City treated as metro for the METRO_CITIES distance category."""

    city = models.CharField(max_length=100, unique=True)
    is_active = models.BooleanField(default=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        verbose_name_plural = "Metro cities"
        ordering = ['city']

    def __str__(self):
        return self.city


class StateNeighbor(models.Model):
    """Pair of bordering states; lookups are symmetric."""

    state_code = models.CharField(max_length=5)
    neighbor_state_code = models.CharField(max_length=5)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['state_code', 'neighbor_state_code'],
                name='unique_state_neighbor'
            ),
        ]

    def __str__(self):
        return f"{self.state_code} <-> {self.neighbor_state_code}"


# ===========================================
# RATE MASTERS
# ===========================================

class WeightSlab(models.Model):
    """Inclusive weight band in grams."""

    slab_name = models.CharField(max_length=100)
    min_weight_grams = models.PositiveIntegerField()
    max_weight_grams = models.PositiveIntegerField()
    is_active = models.BooleanField(default=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ['min_weight_grams']

    def __str__(self):
        return f"{self.slab_name} ({self.min_weight_grams}-{self.max_weight_grams}g)"

    @classmethod
    def for_grams(cls, grams):
        """Active slab with min <= grams <= max."""
        return cls.objects.active().filter(
            min_weight_grams__lte=grams,
            max_weight_grams__gte=grams
        ).order_by('min_weight_grams').first()


class DistanceSlab(models.Model):
    code = models.CharField(max_length=20, unique=True, choices=DistanceCategory.choices)
    title = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.title


class ServiceType(models.Model):
    code = models.CharField(max_length=50, unique=True)
    title = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ['title']

    def __str__(self):
        return self.title


class Mode(models.Model):
    code = models.CharField(max_length=50, unique=True)
    title = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ['title']

    def __str__(self):
        return self.title


class QuotationDefault(models.Model):
    """
    Flat slab price used to pre-fill booking gross amounts.

    Matches when the booking center's region and package type agree and
    min_weight_grams < weight <= max_weight_grams.
    """

    region = models.ForeignKey(Region, on_delete=models.CASCADE, related_name='quotation_defaults')
    package_type = models.CharField(max_length=50)
    min_weight_grams = models.PositiveIntegerField(default=0)
    max_weight_grams = models.PositiveIntegerField()
    base_rate = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ['region', 'package_type', 'min_weight_grams']

    def __str__(self):
        return f"{self.region} / {self.package_type} ({self.min_weight_grams}-{self.max_weight_grams}g)"


class PartyQuotation(models.Model):
    """
    Quoted rate card of a party for one package type.

    `rates` is the card as entered (slab labels to amounts); one row per
    party and package type.
    """

    party = models.ForeignKey('parties.Party', on_delete=models.CASCADE, related_name='quotations')
    package_type = models.CharField(max_length=50)
    rates = models.JSONField()

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['party', 'package_type']
        constraints = [
            models.UniqueConstraint(fields=['party', 'package_type'], name='unique_party_quotation'),
        ]

    def __str__(self):
        return f"{self.party} / {self.package_type}"


class PartyRateSlab(models.Model):
    """
    Negotiated rate for a party, keyed by shipment type, mode, service
    type, distance slab and weight slab.
    """

    party = models.ForeignKey(
        'parties.Party',
        on_delete=models.CASCADE,
        related_name='rate_slabs'
    )
    shipment_type = models.CharField(max_length=20, choices=ShipmentType.choices)
    mode = models.ForeignKey(Mode, on_delete=models.PROTECT, related_name='rate_slabs')
    service_type = models.ForeignKey(ServiceType, on_delete=models.PROTECT, related_name='rate_slabs')
    distance_slab = models.ForeignKey(DistanceSlab, on_delete=models.PROTECT, related_name='rate_slabs')
    slab = models.ForeignKey(WeightSlab, on_delete=models.PROTECT, related_name='rate_slabs')

    rate = models.DecimalField(max_digits=10, decimal_places=2)
    fuel_pct = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    packing = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    handling = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    gst_pct = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('18.00'))

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ['-updated_at', '-id']
        indexes = [
            models.Index(
                fields=['party', 'shipment_type', 'mode', 'service_type', 'distance_slab', 'slab'],
                name='party_rate_lookup_idx'
            ),
        ]

    def __str__(self):
        return f"{self.party} | {self.service_type} | {self.distance_slab} | {self.slab.slab_name}: {self.rate}"
