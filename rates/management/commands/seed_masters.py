"""
Django management command to seed rate masters.

Creates modes, service types, distance slabs, default weight slabs,
carriers, metro cities and state neighbours. Safe to run repeatedly.

Usage:
    python manage.py seed_masters
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from rates.models import (
    Carrier, DistanceCategory, DistanceSlab, MetroCity, Mode,
    ServiceType, StateNeighbor, WeightSlab,
)

MODES = [
    ('DOCUMENT', 'Document'),
    ('NON_DOCUMENT', 'Non Document'),
]

SERVICE_TYPES = [
    ('AIR_CARGO', 'Air Cargo'),
    ('B2C_PRIORITY', 'B2C Priority'),
    ('B2C_SMART_EXPRESS', 'B2C Smart Express'),
    ('EXPRESS', 'Express'),
    ('GROUND_EXPRESS', 'Ground Express'),
    ('PREMIUM', 'Premium'),
    ('STD_EXP_A', 'Standard Express A'),
    ('STD_EXP_S', 'Standard Express S'),
    ('SURFACE_EXPRESS', 'Surface Express'),
]

WEIGHT_SLABS = [
    ('Up to 250g', 0, 250),
    ('251g - 500g', 251, 500),
    ('501g - 1kg', 501, 1000),
    ('1kg - 2kg', 1001, 2000),
    ('2kg - 5kg', 2001, 5000),
    ('5kg - 10kg', 5001, 10000),
]

CARRIERS = [
    ('Professional Courier', 'PROF'),
    ('DTDC', 'DTDC'),
    ('Blue Dart', 'BD'),
]

METRO_CITIES = [
    'Mumbai', 'Delhi', 'Pune', 'Bengaluru', 'Chennai',
    'Kolkata', 'Hyderabad', 'Ahmedabad',
]

STATE_NEIGHBORS = [
    ('MH', 'GJ'), ('MH', 'MP'), ('MH', 'CG'), ('MH', 'TS'), ('MH', 'KA'),
    ('DL', 'HR'), ('DL', 'UP'),
    ('KA', 'TN'), ('KA', 'KL'), ('KA', 'AP'), ('KA', 'TS'),
    ('TN', 'KL'), ('TN', 'AP'),
    ('TS', 'AP'), ('TS', 'CG'),
    ('GJ', 'RJ'), ('GJ', 'MP'),
    ('UP', 'MP'), ('UP', 'RJ'), ('UP', 'HR'), ('UP', 'BR'), ('UP', 'JH'), ('UP', 'CG'),
    ('MP', 'RJ'), ('MP', 'CG'),
    ('RJ', 'HR'), ('RJ', 'PB'),
    ('HR', 'PB'),
    ('BR', 'JH'), ('BR', 'WB'),
    ('WB', 'JH'), ('WB', 'OD'), ('WB', 'AS'),
    ('OD', 'JH'), ('OD', 'CG'), ('OD', 'AP'),
    ('JH', 'CG'),
]


class Command(BaseCommand):
    help = 'Seed modes, service types, distance/weight slabs, carriers and metro cities'

    @transaction.atomic
    def handle(self, *args, **options):
        created_count = 0

        for code, title in MODES:
            _, created = Mode.objects.get_or_create(code=code, defaults={'title': title})
            created_count += self._report(created, f'Mode {code}')

        for code, title in SERVICE_TYPES:
            _, created = ServiceType.objects.get_or_create(code=code, defaults={'title': title})
            created_count += self._report(created, f'Service type {code}')

        for code, title in DistanceCategory.choices:
            _, created = DistanceSlab.objects.get_or_create(code=code, defaults={'title': title})
            created_count += self._report(created, f'Distance slab {code}')

        for name, min_g, max_g in WEIGHT_SLABS:
            _, created = WeightSlab.objects.get_or_create(
                min_weight_grams=min_g,
                max_weight_grams=max_g,
                defaults={'slab_name': name}
            )
            created_count += self._report(created, f'Weight slab {name}')

        for name, code in CARRIERS:
            _, created = Carrier.objects.get_or_create(name=name, defaults={'code': code})
            created_count += self._report(created, f'Carrier {name}')

        for city in METRO_CITIES:
            _, created = MetroCity.objects.get_or_create(city=city)
            created_count += self._report(created, f'Metro city {city}')

        for a, b in STATE_NEIGHBORS:
            _, created = StateNeighbor.objects.get_or_create(state_code=a, neighbor_state_code=b)
            created_count += self._report(created, f'Neighbours {a}-{b}')

        self.stdout.write(self.style.SUCCESS(f'\nSeed complete: {created_count} records created'))

    def _report(self, created, label):
        if created:
            self.stdout.write(self.style.SUCCESS(f'Created: {label}'))
            return 1
        self.stdout.write(f'Exists: {label}')
        return 0
