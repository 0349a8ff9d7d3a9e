"""
Django Admin configuration for RATES app.
"""

from django.contrib import admin
from .models import (
    Region, Center, Carrier, MetroCity, StateNeighbor, WeightSlab,
    DistanceSlab, ServiceType, Mode, QuotationDefault, PartyRateSlab, PartyQuotation,
)


@admin.register(Region)
class RegionAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'is_active')
    search_fields = ('name', 'code')


@admin.register(Center)
class CenterAdmin(admin.ModelAdmin):
    list_display = ('city', 'region', 'is_active')
    list_filter = ('region', 'is_active')
    search_fields = ('city',)


@admin.register(Carrier)
class CarrierAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'is_active')


@admin.register(MetroCity)
class MetroCityAdmin(admin.ModelAdmin):
    list_display = ('city', 'is_active')


@admin.register(StateNeighbor)
class StateNeighborAdmin(admin.ModelAdmin):
    list_display = ('state_code', 'neighbor_state_code')
    search_fields = ('state_code', 'neighbor_state_code')


@admin.register(WeightSlab)
class WeightSlabAdmin(admin.ModelAdmin):
    list_display = ('slab_name', 'min_weight_grams', 'max_weight_grams', 'is_active')
    ordering = ('min_weight_grams',)


@admin.register(DistanceSlab)
class DistanceSlabAdmin(admin.ModelAdmin):
    list_display = ('code', 'title', 'is_active')


@admin.register(ServiceType)
class ServiceTypeAdmin(admin.ModelAdmin):
    list_display = ('code', 'title', 'is_active')
    search_fields = ('code', 'title')


@admin.register(Mode)
class ModeAdmin(admin.ModelAdmin):
    list_display = ('code', 'title', 'is_active')


@admin.register(QuotationDefault)
class QuotationDefaultAdmin(admin.ModelAdmin):
    list_display = ('region', 'package_type', 'min_weight_grams', 'max_weight_grams', 'base_rate')
    list_filter = ('region', 'package_type')


@admin.register(PartyRateSlab)
class PartyRateSlabAdmin(admin.ModelAdmin):
    list_display = (
        'party', 'shipment_type', 'mode', 'service_type',
        'distance_slab', 'slab', 'rate', 'fuel_pct', 'gst_pct', 'is_active'
    )
    list_filter = ('shipment_type', 'mode', 'service_type', 'distance_slab', 'is_active')
    search_fields = ('party__party_name',)
    autocomplete_fields = ('party',)
    list_select_related = ('party', 'mode', 'service_type', 'distance_slab', 'slab')


@admin.register(PartyQuotation)
class PartyQuotationAdmin(admin.ModelAdmin):
    list_display = ('party', 'package_type', 'updated_at')
    list_filter = ('package_type',)
    search_fields = ('party__party_name',)
    autocomplete_fields = ('party',)
    readonly_fields = ('created_by', 'updated_by', 'created_at', 'updated_at')
