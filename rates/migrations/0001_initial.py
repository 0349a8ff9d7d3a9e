from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Region',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('code', models.CharField(blank=True, max_length=20)),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={'ordering': ['name']},
        ),
        migrations.CreateModel(
            name='Center',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('city', models.CharField(max_length=100)),
                ('address', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('region', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='centers', to='rates.region')),
            ],
            options={'ordering': ['city']},
        ),
        migrations.CreateModel(
            name='Carrier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('code', models.CharField(blank=True, max_length=20)),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={'ordering': ['name']},
        ),
        migrations.CreateModel(
            name='MetroCity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('city', models.CharField(max_length=100, unique=True)),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={'verbose_name_plural': 'Metro cities', 'ordering': ['city']},
        ),
        migrations.CreateModel(
            name='StateNeighbor',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('state_code', models.CharField(max_length=5)),
                ('neighbor_state_code', models.CharField(max_length=5)),
            ],
            options={
                'constraints': [models.UniqueConstraint(fields=('state_code', 'neighbor_state_code'), name='unique_state_neighbor')],
            },
        ),
        migrations.CreateModel(
            name='WeightSlab',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('slab_name', models.CharField(max_length=100)),
                ('min_weight_grams', models.PositiveIntegerField()),
                ('max_weight_grams', models.PositiveIntegerField()),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={'ordering': ['min_weight_grams']},
        ),
        migrations.CreateModel(
            name='DistanceSlab',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(choices=[('METRO_CITIES', 'Metro Cities'), ('WITHIN_STATE', 'Within State'), ('OUT_OF_STATE', 'Out of State'), ('OTHER_STATE', 'Other State')], max_length=20, unique=True)),
                ('title', models.CharField(max_length=100)),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={'ordering': ['id']},
        ),
        migrations.CreateModel(
            name='ServiceType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=50, unique=True)),
                ('title', models.CharField(max_length=100)),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={'ordering': ['title']},
        ),
        migrations.CreateModel(
            name='Mode',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=50, unique=True)),
                ('title', models.CharField(max_length=100)),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={'ordering': ['title']},
        ),
        migrations.CreateModel(
            name='QuotationDefault',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('package_type', models.CharField(max_length=50)),
                ('min_weight_grams', models.PositiveIntegerField(default=0)),
                ('max_weight_grams', models.PositiveIntegerField()),
                ('base_rate', models.DecimalField(decimal_places=2, max_digits=10)),
                ('region', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='quotation_defaults', to='rates.region')),
            ],
            options={'ordering': ['region', 'package_type', 'min_weight_grams']},
        ),
        migrations.CreateModel(
            name='PartyRateSlab',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('shipment_type', models.CharField(choices=[('DOCUMENT', 'Document'), ('NON_DOCUMENT', 'Non Document')], max_length=20)),
                ('rate', models.DecimalField(decimal_places=2, max_digits=10)),
                ('fuel_pct', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('packing', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('handling', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('gst_pct', models.DecimalField(decimal_places=2, default=Decimal('18.00'), max_digits=5)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('party', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rate_slabs', to='parties.party')),
                ('mode', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rate_slabs', to='rates.mode')),
                ('service_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rate_slabs', to='rates.servicetype')),
                ('distance_slab', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rate_slabs', to='rates.distanceslab')),
                ('slab', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rate_slabs', to='rates.weightslab')),
            ],
            options={
                'ordering': ['-updated_at', '-id'],
                'indexes': [models.Index(fields=['party', 'shipment_type', 'mode', 'service_type', 'distance_slab', 'slab'], name='party_rate_lookup_idx')],
            },
        ),
    ]
