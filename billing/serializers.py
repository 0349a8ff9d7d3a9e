"""
Billing App Serializers
"""

from rest_framework import serializers

from .models import (
    CsvInvoice, Invoice, InvoiceItem, Bill, BillBooking, BookingType,
    PartyPayment, PaymentAllocation, PaymentStatus,
)


# ===========================================
# CSV CONSIGNMENTS
# ===========================================

class CsvInvoiceSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True, default=None)
    is_billed = serializers.BooleanField(read_only=True)

    class Meta:
        model = CsvInvoice
        fields = '__all__'
        read_only_fields = ['id', 'calculated_amount', 'pricing_meta', 'invoice', 'created_at', 'updated_at']


class CsvImportSerializer(serializers.Serializer):
    file = serializers.FileField()


class ApplyRatesSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)


class GenerateInvoicesSerializer(serializers.Serializer):
    party = serializers.CharField(required=False, allow_blank=True)


class PartyInvoiceSerializer(serializers.Serializer):
    """Body of POST party-invoices/."""

    rowIds = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    partyName = serializers.CharField(required=False, allow_blank=True)

    base_rate = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=0)
    fuel_pct = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, allow_null=True, min_value=0)
    packing = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=0)
    handling = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=0)
    gst_percent = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, allow_null=True, min_value=0)

    shipment_type = serializers.CharField(required=False, allow_blank=True)
    mode = serializers.CharField(required=False, allow_blank=True)
    service_type = serializers.CharField(required=False, allow_blank=True)
    distance_region = serializers.CharField(required=False, allow_blank=True)
    weight_slab = serializers.CharField(required=False, allow_blank=True)
    period_from = serializers.DateField(required=False, allow_null=True)
    period_to = serializers.DateField(required=False, allow_null=True)
    payment_mode = serializers.CharField(required=False, allow_blank=True)

    OVERRIDES = ('base_rate', 'fuel_pct', 'packing', 'handling', 'gst_percent')
    METADATA = ('shipment_type', 'mode', 'service_type', 'distance_region', 'weight_slab',
                'period_from', 'period_to', 'payment_mode')

    def overrides(self):
        return {k: self.validated_data.get(k) for k in self.OVERRIDES}

    def metadata(self):
        data = {k: self.validated_data.get(k) for k in self.METADATA}
        for key in ('period_from', 'period_to'):
            if data[key]:
                data[key] = data[key].isoformat()
        return data


# ===========================================
# INVOICES
# ===========================================

class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = [
            'id', 'description', 'quantity', 'unit_price', 'total_price', 'booking_date',
            'consignment_no', 'shipment_type', 'service_type', 'weight'
        ]
        read_only_fields = ['id', 'total_price']


class InvoiceSerializer(serializers.ModelSerializer):
    """Invoice with line items; totals are recomputed on every update."""

    party_name = serializers.CharField(source='party.party_name', read_only=True)
    items = InvoiceItemSerializer(many=True, required=False)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    payment_status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'party', 'party_name', 'invoice_date', 'due_date',
            'subtotal', 'tax_amount', 'additional_charges', 'received_amount', 'total_amount',
            'balance', 'payment_status', 'notes', 'apply_slab', 'slab_amount', 'slab_breakdown',
            'items', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'total_amount', 'received_amount', 'created_by', 'created_at', 'updated_at']
        extra_kwargs = {'invoice_number': {'required': False}}

    def _save(self, instance, validated_data):
        from .services.invoicing import InvoiceService

        items = validated_data.pop('items', None)
        return InvoiceService.update_invoice(instance, validated_data, items)

    def create(self, validated_data):
        user = validated_data.pop('created_by', None)
        items = validated_data.pop('items', None)
        invoice = Invoice(created_by=user)
        if items is None:
            items = []
        validated_data['items'] = items
        return self._save(invoice, validated_data)

    def update(self, instance, validated_data):
        return self._save(instance, validated_data)


class InvoiceListSerializer(serializers.ModelSerializer):
    party_name = serializers.CharField(source='party.party_name', read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'party', 'party_name', 'invoice_date',
            'total_amount', 'received_amount', 'payment_status', 'created_at'
        ]


# ===========================================
# BILLS
# ===========================================

class BillBookingSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillBooking
        fields = ['id', 'booking_type', 'booking_id']


class BillSerializer(serializers.ModelSerializer):
    party_name = serializers.CharField(source='party.party_name', read_only=True)
    bookings = BillBookingSerializer(many=True, read_only=True)

    class Meta:
        model = Bill
        fields = '__all__'


class SelectedBookingSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    booking_type = serializers.ChoiceField(choices=BookingType.choices, default=BookingType.ACCOUNT)


class BillGenerateSerializer(serializers.Serializer):
    party_id = serializers.IntegerField()
    invoice_number = serializers.CharField(max_length=50)
    invoice_date = serializers.DateField(required=False)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    base_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    service_charges = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    fuel_charges = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    other_charges = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    cgst_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    sgst_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    igst_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    template = serializers.CharField(required=False, allow_blank=True, default='Default')
    send_email = serializers.BooleanField(required=False, default=False)
    bill_type = serializers.CharField(required=False, allow_blank=True, default='')
    selected_bookings = SelectedBookingSerializer(many=True, required=False, default=list)


class PeriodBillSerializer(serializers.Serializer):
    party_id = serializers.IntegerField()
    date_from = serializers.DateField()
    date_to = serializers.DateField()

    def validate(self, attrs):
        if attrs['date_from'] > attrs['date_to']:
            raise serializers.ValidationError({'date_to': 'date_to must not be before date_from.'})
        return attrs


# ===========================================
# PARTY PAYMENTS
# ===========================================

class PaymentAllocationSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True)

    class Meta:
        model = PaymentAllocation
        fields = ['id', 'invoice', 'invoice_number', 'amount']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Allocation amount must be positive")
        return value


class PartyPaymentSerializer(serializers.ModelSerializer):
    allocations = PaymentAllocationSerializer(many=True, required=False)
    party_name = serializers.CharField(source='party.party_name', read_only=True)

    class Meta:
        model = PartyPayment
        fields = [
            'id', 'party', 'party_name', 'payment_date', 'amount', 'tds_deduct', 'discount', 'payment_method',
            'reference_no', 'notes', 'allocations', 'created_by', 'created_at'
        ]
        read_only_fields = ['id', 'created_by', 'created_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be positive")
        return value

    def validate_tds_deduct(self, value):
        if value < 0:
            raise serializers.ValidationError("TDS cannot be negative")
        return value

    def validate_discount(self, value):
        if value < 0:
            raise serializers.ValidationError("Discount cannot be negative")
        return value

    def validate(self, attrs):
        allocated = sum((a['amount'] for a in attrs.get('allocations', [])), 0)
        if allocated > attrs['amount']:
            raise serializers.ValidationError("Allocations exceed the payment amount")
        return attrs

    def create(self, validated_data):
        from .services.payments import PaymentService

        allocations = validated_data.pop('allocations', [])
        return PaymentService.record_payment(
            party=validated_data.pop('party'),
            payment_date=validated_data.pop('payment_date'),
            amount=validated_data.pop('amount'),
            allocations=allocations,
            user=validated_data.pop('created_by', None),
            **validated_data
        )


class InvoiceAllocationSerializer(serializers.ModelSerializer):
    """Allocation seen from its invoice, with the payment it came from."""

    payment_date = serializers.DateField(source='party_payment.payment_date', read_only=True)
    party_payment_amount = serializers.DecimalField(
        source='party_payment.amount', max_digits=12, decimal_places=2, read_only=True
    )
    payment_method = serializers.CharField(source='party_payment.payment_method', read_only=True)
    reference_no = serializers.CharField(source='party_payment.reference_no', read_only=True)

    class Meta:
        model = PaymentAllocation
        fields = [
            'id', 'party_payment', 'invoice', 'amount', 'created_at',
            'payment_date', 'party_payment_amount', 'payment_method', 'reference_no',
        ]
