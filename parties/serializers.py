"""
Parties App Serializers
"""

from rest_framework import serializers

from .models import Party, GstType


class PartySerializer(serializers.ModelSerializer):
    """Full party profile."""

    class Meta:
        model = Party
        fields = [
            'id', 'party_name', 'contact_person', 'phone', 'email',
            'address', 'city', 'state', 'pincode',
            'gst_number', 'gst_type', 'pan_number',
            'shipping_address', 'shipping_city', 'shipping_state', 'shipping_pincode',
            'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_party_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Party name is required")
        duplicates = Party.objects.by_name(value)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("A party with this name already exists")
        return value

    def validate(self, attrs):
        gst_type = attrs.get('gst_type', getattr(self.instance, 'gst_type', GstType.UNREGISTERED))
        gst_number = attrs.get('gst_number', getattr(self.instance, 'gst_number', ''))
        if gst_type in (GstType.REGISTERED, GstType.COMPOSITION) and not gst_number:
            raise serializers.ValidationError({'gst_number': "GSTIN is required for registered parties"})
        if gst_number:
            attrs['gst_number'] = gst_number.strip().upper()
        return attrs


class PartyListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for party pickers."""

    class Meta:
        model = Party
        fields = ['id', 'party_name', 'contact_person', 'phone', 'city', 'gst_type']
