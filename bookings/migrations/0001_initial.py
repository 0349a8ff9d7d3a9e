import bookings.models
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _booking_base_fields():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('sender', models.CharField(max_length=255)),
        ('center', models.CharField(blank=True, max_length=255)),
        ('receiver', models.CharField(max_length=255)),
        ('carrier', models.CharField(blank=True, max_length=255)),
        ('package_type', models.CharField(blank=True, max_length=100)),
        ('weight', models.DecimalField(blank=True, decimal_places=3, max_digits=10, null=True)),
        ('weight_unit', models.CharField(choices=[('kg', 'Kilograms'), ('g', 'Grams')], default='kg', max_length=10)),
        ('number_of_boxes', models.PositiveIntegerField(blank=True, null=True)),
        ('gross_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
        ('gross_amount_source', models.CharField(choices=[('slab', 'Slab quote'), ('manual', 'Entered manually')], default='manual', max_length=10)),
        ('insurance_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
        ('parcel_value', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
        ('net_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
        ('remarks', models.TextField(blank=True)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CashBooking',
            fields=_booking_base_fields() + [
                ('date', models.DateField()),
                ('sender_mobile', models.CharField(blank=True, max_length=20)),
                ('sender_address', models.TextField(blank=True)),
                ('receiver_mobile', models.CharField(blank=True, max_length=20)),
                ('receiver_address', models.TextField(blank=True)),
                ('reference_number', models.CharField(blank=True, max_length=255)),
                ('fuel_charge_percent', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('cgst_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('sgst_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['date'], name='cash_booking_date_idx')],
            },
        ),
        migrations.CreateModel(
            name='AccountBooking',
            fields=_booking_base_fields() + [
                ('booking_date', models.DateField()),
                ('mobile', models.CharField(blank=True, max_length=20)),
                ('reference_number', models.CharField(default=bookings.models.default_account_reference, max_length=255)),
                ('consignment_number', models.CharField(blank=True, max_length=255)),
                ('other_charges', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('billed', 'Billed'), ('cancelled', 'Cancelled')], default='pending', max_length=20)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['booking_date'], name='account_booking_date_idx'),
                    models.Index(fields=['sender'], name='account_booking_sender_idx'),
                ],
            },
        ),
    ]
