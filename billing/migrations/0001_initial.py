import uuid
from decimal import Decimal

import billing.models
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


def _nullable_text(max_length=None):
    if max_length is None:
        return models.TextField(blank=True, null=True)
    return models.CharField(blank=True, max_length=max_length, null=True)


def _nullable_decimal(max_digits=12, decimal_places=2):
    return models.DecimalField(blank=True, decimal_places=decimal_places, max_digits=max_digits, null=True)


def _money():
    return models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('parties', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Invoice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('invoice_number', models.CharField(default=billing.models.generate_invoice_number, max_length=50, unique=True)),
                ('invoice_date', models.DateField(default=django.utils.timezone.localdate)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('subtotal', _money()),
                ('tax_amount', _money()),
                ('additional_charges', _money()),
                ('received_amount', _money()),
                ('total_amount', _money()),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('partial', 'Partially paid'), ('paid', 'Paid'), ('overdue', 'Overdue')], default='pending', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('apply_slab', models.BooleanField(default=False)),
                ('slab_amount', _money()),
                ('slab_breakdown', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='invoices_created', to=settings.AUTH_USER_MODEL)),
                ('party', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='invoices', to='parties.party')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['invoice_date'], name='invoice_date_idx'),
                    models.Index(fields=['party', 'payment_status'], name='invoice_party_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='InvoiceItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('description', models.CharField(max_length=255)),
                ('quantity', models.DecimalField(decimal_places=2, default=Decimal('1'), max_digits=10)),
                ('unit_price', _money()),
                ('total_price', _money()),
                ('booking_date', models.DateField(blank=True, null=True)),
                ('consignment_no', models.CharField(blank=True, max_length=255)),
                ('shipment_type', models.CharField(blank=True, max_length=100)),
                ('service_type', models.CharField(blank=True, max_length=100)),
                ('weight', models.DecimalField(blank=True, decimal_places=3, max_digits=10, null=True)),
                ('invoice', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='billing.invoice')),
            ],
            options={'ordering': ['id']},
        ),
        migrations.CreateModel(
            name='CsvInvoice',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('booking_date', models.DateField(blank=True, null=True)),
                ('booking_reference', models.CharField(blank=True, max_length=255, null=True, unique=True)),
                ('consignment_no', models.CharField(blank=True, max_length=255, null=True, unique=True)),
                ('mode', _nullable_text(100)),
                ('service_type', _nullable_text(100)),
                ('weight', _nullable_decimal(10, 3)),
                ('prepaid_amount', _nullable_decimal()),
                ('final_collected', _nullable_decimal()),
                ('retail_price', _nullable_decimal()),
                ('sender_name', _nullable_text(255)),
                ('sender_phone', _nullable_text(50)),
                ('sender_address', _nullable_text()),
                ('recipient_name', _nullable_text(255)),
                ('recipient_phone', _nullable_text(50)),
                ('recipient_address', _nullable_text()),
                ('booking_mode', _nullable_text(100)),
                ('shipment_type', _nullable_text(100)),
                ('risk_surcharge_amount', _nullable_decimal()),
                ('risk_surcharge_type', _nullable_text(100)),
                ('contents', _nullable_text()),
                ('declared_value', _nullable_decimal()),
                ('eway_bill', _nullable_text(100)),
                ('gst_invoice', _nullable_text(100)),
                ('customer', _nullable_text(255)),
                ('service_code', _nullable_text(100)),
                ('region', _nullable_text(255)),
                ('payment_mode', _nullable_text(100)),
                ('chargeable_weight', _nullable_decimal(10, 3)),
                ('payment_utr', _nullable_text(255)),
                ('employee_code', _nullable_text(100)),
                ('employee_discount_percent', _nullable_decimal(5, 2)),
                ('employee_discount_amount', _nullable_decimal()),
                ('promocode', _nullable_text(100)),
                ('promocode_discount', _nullable_decimal()),
                ('packing_material', _nullable_text(255)),
                ('no_of_stretch_films', models.IntegerField(blank=True, null=True)),
                ('calculated_amount', _nullable_decimal()),
                ('pricing_meta', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('invoice', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='csv_rows', to='billing.invoice')),
            ],
            options={
                'verbose_name': 'CSV consignment',
                'verbose_name_plural': 'CSV consignments',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['sender_name'], name='csv_sender_idx'),
                    models.Index(fields=['booking_date'], name='csv_booking_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Bill',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('bill_number', models.CharField(max_length=50)),
                ('bill_date', models.DateField(default=django.utils.timezone.localdate)),
                ('bill_type', models.CharField(blank=True, max_length=30)),
                ('base_amount', _money()),
                ('service_charges', _money()),
                ('fuel_charges', _money()),
                ('other_charges', _money()),
                ('cgst_amount', _money()),
                ('sgst_amount', _money()),
                ('igst_amount', _money()),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('template', models.CharField(default='Default', max_length=50)),
                ('email_sent', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('generated', 'Generated'), ('sent', 'Sent'), ('cancelled', 'Cancelled')], default='generated', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('party', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bills', to='parties.party')),
            ],
            options={'ordering': ['-created_at']},
        ),
        migrations.CreateModel(
            name='BillBooking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('booking_type', models.CharField(choices=[('account', 'Account'), ('cash', 'Cash')], max_length=20)),
                ('booking_id', models.PositiveIntegerField()),
                ('bill', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bookings', to='billing.bill')),
            ],
            options={'ordering': ['id']},
        ),
        migrations.CreateModel(
            name='PartyPayment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('payment_date', models.DateField()),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('payment_method', models.CharField(blank=True, max_length=50)),
                ('reference_no', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('party', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='parties.party')),
            ],
            options={'ordering': ['-payment_date', '-id']},
        ),
        migrations.CreateModel(
            name='PaymentAllocation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('invoice', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='allocations', to='billing.invoice')),
                ('party_payment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='allocations', to='billing.partypayment')),
            ],
            options={'ordering': ['id']},
        ),
    ]
