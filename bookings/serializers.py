"""
Bookings App Serializers
"""

from rest_framework import serializers

from .models import CashBooking, AccountBooking, GrossAmountSource, WeightUnit
from .services import resolve_gross_amount


class BookingSerializerMixin:
    """
    Fills gross_amount / gross_amount_source from the slab quote and lets
    the model compute net_amount when the client leaves it out.
    """

    # Fields whose change makes a stored net amount stale
    net_inputs = ()

    def _quote_inputs(self, attrs):
        def current(field, default=None):
            return attrs.get(field, getattr(self.instance, field, default))
        return (
            current('center', ''),
            current('package_type', ''),
            current('weight'),
            current('weight_unit', WeightUnit.KG),
        )

    def validate(self, attrs):
        attrs = super().validate(attrs)
        quote_fields = {'gross_amount', 'center', 'package_type', 'weight', 'weight_unit'}
        if self.instance is None or quote_fields & set(attrs):
            supplied = attrs.get('gross_amount', getattr(self.instance, 'gross_amount', None))
            if self.instance is not None and 'gross_amount' not in attrs \
                    and self.instance.gross_amount_source == GrossAmountSource.SLAB:
                supplied = None
            gross, source = resolve_gross_amount(supplied, *self._quote_inputs(attrs))
            attrs['gross_amount'] = gross
            attrs['gross_amount_source'] = source

        if self.instance is not None and 'net_amount' not in attrs \
                and set(self.net_inputs) & set(attrs):
            attrs['net_amount'] = None
        return attrs

    def validate_weight(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Weight cannot be negative")
        return value


class CashBookingSerializer(BookingSerializerMixin, serializers.ModelSerializer):
    net_inputs = ('gross_amount', 'fuel_charge_percent', 'insurance_amount', 'cgst_amount', 'sgst_amount',
                  'center', 'package_type', 'weight', 'weight_unit')

    class Meta:
        model = CashBooking
        fields = [
            'id', 'date', 'sender', 'sender_mobile', 'sender_address', 'center',
            'receiver', 'receiver_mobile', 'receiver_address', 'carrier',
            'reference_number', 'package_type', 'weight', 'weight_unit', 'number_of_boxes',
            'gross_amount', 'gross_amount_source', 'fuel_charge_percent', 'insurance_amount',
            'cgst_amount', 'sgst_amount', 'net_amount', 'parcel_value', 'remarks',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'gross_amount_source', 'created_at', 'updated_at']


class AccountBookingSerializer(BookingSerializerMixin, serializers.ModelSerializer):
    net_inputs = ('gross_amount', 'other_charges', 'insurance_amount',
                  'center', 'package_type', 'weight', 'weight_unit')

    class Meta:
        model = AccountBooking
        fields = [
            'id', 'booking_date', 'sender', 'center', 'receiver', 'mobile', 'carrier',
            'reference_number', 'consignment_number', 'package_type',
            'weight', 'weight_unit', 'number_of_boxes',
            'gross_amount', 'gross_amount_source', 'other_charges', 'insurance_amount',
            'parcel_value', 'net_amount', 'remarks', 'status',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'gross_amount_source', 'created_at', 'updated_at']
        extra_kwargs = {'reference_number': {'required': False}}


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class GrossQuoteQuerySerializer(serializers.Serializer):
    center = serializers.CharField()
    package_type = serializers.CharField()
    weight = serializers.DecimalField(max_digits=10, decimal_places=3, min_value=0)
    weight_unit = serializers.ChoiceField(choices=WeightUnit.choices, default=WeightUnit.KG)
