"""
Rates App Serializers - Masters, Party Rate Slabs & Party Quotations
"""

from rest_framework import serializers

from .models import (
    Region, Center, Carrier, WeightSlab, DistanceSlab, ServiceType, Mode,
    QuotationDefault, PartyRateSlab, PartyQuotation, ShipmentType,
)


class RegionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Region
        fields = ['id', 'name', 'code', 'is_active']


class CenterSerializer(serializers.ModelSerializer):
    region_name = serializers.CharField(source='region.name', read_only=True)

    class Meta:
        model = Center
        fields = ['id', 'city', 'address', 'region', 'region_name', 'is_active']


class CarrierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Carrier
        fields = ['id', 'name', 'code', 'is_active']


class WeightSlabSerializer(serializers.ModelSerializer):

    class Meta:
        model = WeightSlab
        fields = ['id', 'slab_name', 'min_weight_grams', 'max_weight_grams', 'is_active']

    def validate(self, attrs):
        low = attrs.get('min_weight_grams', getattr(self.instance, 'min_weight_grams', 0))
        high = attrs.get('max_weight_grams', getattr(self.instance, 'max_weight_grams', 0))
        if low > high:
            raise serializers.ValidationError("min_weight_grams cannot exceed max_weight_grams")
        return attrs


class DistanceSlabSerializer(serializers.ModelSerializer):
    class Meta:
        model = DistanceSlab
        fields = ['id', 'code', 'title', 'is_active']


class ServiceTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ServiceType
        fields = ['id', 'code', 'title', 'is_active']

    def validate_code(self, value):
        return value.strip().upper()


class ModeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Mode
        fields = ['id', 'code', 'title', 'is_active']

    def validate_code(self, value):
        return value.strip().upper()


class QuotationDefaultSerializer(serializers.ModelSerializer):
    region_name = serializers.CharField(source='region.name', read_only=True)

    class Meta:
        model = QuotationDefault
        fields = [
            'id', 'region', 'region_name', 'package_type',
            'min_weight_grams', 'max_weight_grams', 'base_rate'
        ]


class PartyRateSlabSerializer(serializers.ModelSerializer):
    """Party rate slab with readable master labels."""

    party_name = serializers.CharField(source='party.party_name', read_only=True)
    mode_code = serializers.CharField(source='mode.code', read_only=True)
    service_type_code = serializers.CharField(source='service_type.code', read_only=True)
    distance_slab_code = serializers.CharField(source='distance_slab.code', read_only=True)
    slab_name = serializers.CharField(source='slab.slab_name', read_only=True)

    class Meta:
        model = PartyRateSlab
        fields = [
            'id', 'party', 'party_name', 'shipment_type',
            'mode', 'mode_code', 'service_type', 'service_type_code',
            'distance_slab', 'distance_slab_code', 'slab', 'slab_name',
            'rate', 'fuel_pct', 'packing', 'handling', 'gst_pct',
            'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate(self, attrs):
        for field in ('rate', 'fuel_pct', 'packing', 'handling', 'gst_pct'):
            value = attrs.get(field)
            if value is not None and value < 0:
                raise serializers.ValidationError({field: "Must be zero or positive"})
        return attrs


class RateResolveSerializer(serializers.Serializer):
    """Query parameters of party-rate-slabs/resolve/."""

    partyId = serializers.IntegerField()
    shipmentType = serializers.ChoiceField(choices=ShipmentType.choices)
    modeId = serializers.IntegerField()
    serviceTypeId = serializers.IntegerField()
    distanceSlabId = serializers.IntegerField()
    weightGrams = serializers.IntegerField(required=False, min_value=0)
    slabId = serializers.IntegerField(required=False)

    def to_internal_value(self, data):
        if hasattr(data, 'get') and data.get('shipmentType'):
            data = data.copy()
            data['shipmentType'] = str(data['shipmentType']).strip().upper()
        return super().to_internal_value(data)

    def validate(self, attrs):
        if attrs.get('weightGrams') is None and attrs.get('slabId') is None:
            raise serializers.ValidationError("weightGrams or slabId is required")
        return attrs


class QuotationResolveSerializer(serializers.Serializer):
    """Query parameters of quotation-defaults/resolve/."""

    regionId = serializers.IntegerField(required=False)
    packageType = serializers.CharField()
    weightGrams = serializers.IntegerField(required=False, min_value=0, default=0)


# ===========================================
# PARTY QUOTATIONS
# ===========================================

class PartyQuotationSerializer(serializers.ModelSerializer):
    party_name = serializers.CharField(source='party.party_name', read_only=True)

    class Meta:
        model = PartyQuotation
        fields = [
            'id', 'party', 'party_name', 'package_type', 'rates',
            'created_by', 'updated_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_by', 'updated_by', 'created_at', 'updated_at']
        # Saving an existing (party, package_type) replaces its rates
        validators = []

    def validate_package_type(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Package type is required")
        return value

    def validate_rates(self, value):
        if not value or not isinstance(value, (dict, list)):
            raise serializers.ValidationError("Rates must be a non-empty object or list")
        return value


class QuotationCopySerializer(serializers.Serializer):
    source_party_id = serializers.IntegerField()
    target_party_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)

    def validate(self, attrs):
        attrs['target_party_ids'] = [
            pk for pk in dict.fromkeys(attrs['target_party_ids']) if pk != attrs['source_party_id']
        ]
        if not attrs['target_party_ids']:
            raise serializers.ValidationError("At least one target party other than the source is required")
        return attrs
