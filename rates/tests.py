"""
Rates Tests
===========

Tests for:
1. Pricing engine (breakup, GST-inclusive totals, rounding)
2. Distance categorisation from addresses
3. Party rate slab resolution
4. Seed command and rate endpoints
5. Party quotations and quotation defaults
"""

from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from core.models import User, UserRole
from parties.models import Party
from rates.models import (
    DistanceSlab, Mode, ServiceType, WeightSlab, PartyRateSlab, MetroCity, StateNeighbor, ShipmentType,
    Region, QuotationDefault, PartyQuotation,
)
from rates.services.distance import (
    parse_address_basic, resolve_distance, resolve_distance_category,
    extract_city_from_address, distance_display,
)
from rates.services.pricing import pricing_engine, calculate_rate, to_decimal, RateBreakup, RateNotFound
from rates.services.quotations import QuotationService, resolve_quotation_default


class TestPricingEngine(TestCase):

    # ==========================================
    # calculate_rate
    # ==========================================

    def test_full_breakup(self):
        breakup = calculate_rate(100, fuel_pct=10, handling=5, gst_pct=18, slab_name='Upto 500g', packing=5)

        self.assertEqual(breakup.fuel, Decimal('10.00'))
        self.assertEqual(breakup.subtotal, Decimal('120.00'))
        self.assertEqual(breakup.gst, Decimal('21.60'))
        self.assertEqual(breakup.total, Decimal('141.60'))
        self.assertEqual(breakup.sgst, Decimal('10.80'))
        self.assertEqual(breakup.cgst, Decimal('10.80'))
        self.assertEqual(breakup.slab_name, 'Upto 500g')

    def test_rounds_half_up(self):
        breakup = calculate_rate('99.99', fuel_pct='12.5')
        self.assertEqual(breakup.fuel, Decimal('12.50'))
        self.assertEqual(breakup.total, Decimal('112.49'))

    def test_odd_gst_split(self):
        breakup = RateBreakup(gst=Decimal('0.25'))
        self.assertEqual(breakup.sgst + breakup.cgst, Decimal('0.25'))

    def test_to_decimal_tolerates_garbage(self):
        self.assertEqual(to_decimal('1,234.50'), Decimal('1234.50'))
        self.assertEqual(to_decimal('abc'), Decimal('0.00'))
        self.assertEqual(to_decimal('NaN'), Decimal('0.00'))
        self.assertEqual(to_decimal(None), Decimal('0.00'))

    # ==========================================
    # Stored breakups
    # ==========================================

    def test_gst_inclusive_total_keeps_stored_total(self):
        total = pricing_engine.gst_inclusive_total({'subtotal': 100, 'gst': 18, 'total': 118})
        self.assertEqual(total, Decimal('118.00'))

    def test_gst_inclusive_total_fixes_pre_tax_total(self):
        total = pricing_engine.gst_inclusive_total({'base': 100, 'subtotal': 100, 'gstPct': 18, 'total': 100})
        self.assertEqual(total, Decimal('118.00'))

    def test_gst_inclusive_total_defaults_gst(self):
        self.assertEqual(pricing_engine.gst_inclusive_total({'base': 100}), Decimal('118.00'))

    @override_settings(BILLING_DEFAULT_GST_PCT=5)
    def test_default_gst_follows_settings(self):
        self.assertEqual(pricing_engine.gst_inclusive_total({'base': 100}), Decimal('105.00'))
        self.assertEqual(pricing_engine.complete_breakup({'base': 100}).gst_pct, Decimal('5'))

    def test_complete_breakup_fills_gaps(self):
        breakup = pricing_engine.complete_breakup({'base': 100, 'fuel': 10, 'slabName': '0-500'})
        self.assertEqual(breakup.subtotal, Decimal('110.00'))
        self.assertEqual(breakup.gst_pct, Decimal('18'))
        self.assertEqual(breakup.gst, Decimal('19.80'))
        self.assertEqual(breakup.total, Decimal('129.80'))
        self.assertEqual(breakup.slab_name, '0-500')

    def test_meta_round_trip_keys(self):
        meta = calculate_rate(50, gst_pct=18).to_meta()
        self.assertEqual(set(meta), {'base', 'fuelPct', 'fuel', 'packing', 'handling', 'gstPct', 'gst', 'subtotal', 'total'})
        self.assertEqual(RateBreakup.from_meta(meta).total, Decimal('59.0'))


class TestDistanceResolution(TestCase):

    def setUp(self):
        call_command('seed_masters', stdout=StringIO())

    def test_parse_address(self):
        parsed = parse_address_basic('12 MG Road, Bangalore, Karnataka 560001')
        self.assertEqual(parsed.state_code, 'KA')
        self.assertEqual(parsed.city, 'Bengaluru')
        self.assertEqual(parsed.pincode, '560001')

    def test_two_letter_code_must_stand_alone(self):
        self.assertIsNone(parse_address_basic('Nagpur Road').state_code)

    def test_metro_pair(self):
        resolution = resolve_distance(
            'Andheri East, Mumbai, Maharashtra 400069',
            'Connaught Place, New Delhi 110001'
        )
        self.assertEqual(resolution.code, 'METRO_CITIES')
        self.assertTrue(resolution.both_metro)
        self.assertEqual(resolution.title, 'Metro Cities')
        self.assertEqual(resolution.slab_id, DistanceSlab.objects.get(code='METRO_CITIES').pk)

    def test_metro_wins_over_same_state(self):
        self.assertEqual(
            resolve_distance_category('Kothrud, Pune, Maharashtra', 'Bandra, Mumbai, Maharashtra'),
            'METRO_CITIES'
        )

    def test_within_state(self):
        self.assertEqual(
            resolve_distance_category('College Road, Nashik, Maharashtra 422005', 'Sitabuldi, Nagpur, Maharashtra 440012'),
            'WITHIN_STATE'
        )

    def test_neighbouring_states(self):
        resolution = resolve_distance('Nashik, Maharashtra 422005', 'Athwa, Surat, Gujarat 395001')
        self.assertEqual(resolution.code, 'OUT_OF_STATE')
        self.assertTrue(resolution.is_neighbor)

    def test_other_state(self):
        resolution = resolve_distance('Nashik, Maharashtra 422005', 'Pan Bazar, Guwahati, Assam 781001')
        self.assertEqual(resolution.code, 'OTHER_STATE')
        self.assertFalse(resolution.is_neighbor)

    def test_unknown_address(self):
        resolution = resolve_distance('Somewhere', 'Nashik, Maharashtra')
        self.assertIsNone(resolution.code)
        self.assertIsNone(resolution.slab_id)

    def test_without_neighbour_data_states_count_as_neighbours(self):
        StateNeighbor.objects.all().delete()
        self.assertEqual(
            resolve_distance_category('Nashik, Maharashtra', 'Pan Bazar, Guwahati, Assam'),
            'OUT_OF_STATE'
        )

    def test_inactive_metro_city(self):
        MetroCity.objects.filter(city='Pune').update(is_active=False)
        self.assertEqual(
            resolve_distance_category('Kothrud, Pune, Maharashtra', 'Bandra, Mumbai, Maharashtra'),
            'WITHIN_STATE'
        )

    # ==========================================
    # Display
    # ==========================================

    def test_extract_city(self):
        self.assertEqual(extract_city_from_address('12, MG Road, Indore, 452001'), 'Indore')
        self.assertEqual(extract_city_from_address('Marine Drive, Kochi, India'), 'Kochi')
        self.assertEqual(extract_city_from_address(''), '')

    def test_distance_display(self):
        self.assertEqual(distance_display('Within State', 'MG Road, Indore, 452001'), 'Indore')
        self.assertEqual(distance_display('Mumbai', 'MG Road, Indore, 452001'), 'Mumbai')
        self.assertEqual(distance_display(None, 'MG Road'), '')


class RateSlabFixtureMixin:

    def create_slab_fixtures(self):
        call_command('seed_masters', stdout=StringIO())
        self.party = Party.objects.create(party_name='Acme Traders')
        self.mode = Mode.objects.get(code='DOCUMENT')
        self.service_type = ServiceType.objects.get(code='EXPRESS')
        self.distance_slab = DistanceSlab.objects.get(code='WITHIN_STATE')
        self.weight_slab = WeightSlab.objects.get(min_weight_grams=251, max_weight_grams=500)

    def create_rate_slab(self, party, rate='80.00'):
        return PartyRateSlab.objects.create(
            party=party,
            shipment_type=ShipmentType.DOCUMENT,
            mode=self.mode,
            service_type=self.service_type,
            distance_slab=self.distance_slab,
            slab=self.weight_slab,
            rate=Decimal(rate),
            fuel_pct=Decimal('10.00'),
        )

    def resolve(self, party, **kwargs):
        return pricing_engine.resolve_party_rate(
            party=party,
            shipment_type='document',
            mode=self.mode,
            service_type=self.service_type,
            distance_slab=self.distance_slab,
            **kwargs
        )


class TestPartyRateResolution(RateSlabFixtureMixin, TestCase):

    def setUp(self):
        self.create_slab_fixtures()

    def test_resolves_by_weight(self):
        rate_slab = self.create_rate_slab(self.party)
        resolved, party_id = self.resolve(self.party, weight_grams=300)
        self.assertEqual(resolved, rate_slab)
        self.assertEqual(party_id, self.party.pk)

    def test_falls_back_to_party_with_same_name(self):
        twin = Party.objects.create(party_name='  ACME traders ')
        rate_slab = self.create_rate_slab(twin)

        resolved, party_id = self.resolve(self.party, slab=self.weight_slab)

        self.assertEqual(resolved, rate_slab)
        self.assertEqual(party_id, twin.pk)

    def test_inactive_slab_is_ignored(self):
        rate_slab = self.create_rate_slab(self.party)
        rate_slab.is_active = False
        rate_slab.save()
        with self.assertRaises(RateNotFound):
            self.resolve(self.party, weight_grams=300)

    def test_weight_outside_every_slab(self):
        with self.assertRaises(RateNotFound):
            self.resolve(self.party, weight_grams=50000)


class TestSeedCommand(TestCase):

    def test_seed_is_idempotent(self):
        call_command('seed_masters', stdout=StringIO())
        counts = (Mode.objects.count(), ServiceType.objects.count(), WeightSlab.objects.count())

        out = StringIO()
        call_command('seed_masters', stdout=out)

        self.assertEqual((Mode.objects.count(), ServiceType.objects.count(), WeightSlab.objects.count()), counts)
        self.assertIn('Seed complete: 0 records created', out.getvalue())
        self.assertEqual(DistanceSlab.objects.count(), 4)


class TestRateEndpoints(RateSlabFixtureMixin, TestCase):

    def setUp(self):
        self.create_slab_fixtures()
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def _resolve_params(self, **extra):
        params = {
            'partyId': self.party.pk,
            'shipmentType': 'document',
            'modeId': self.mode.pk,
            'serviceTypeId': self.service_type.pk,
            'distanceSlabId': self.distance_slab.pk,
        }
        params.update(extra)
        return params

    def test_resolve_returns_breakup(self):
        self.create_rate_slab(self.party)

        response = self.client.get('/api/party-rate-slabs/resolve/', self._resolve_params(weightGrams=400))

        self.assertEqual(response.status_code, 200)
        data = response.data['data']
        self.assertEqual(data['baseRate'], 80.0)
        self.assertEqual(data['fuelPct'], 10.0)
        self.assertEqual(data['slabName'], '251g - 500g')
        self.assertEqual(data['breakup']['total'], 103.84)

    def test_resolve_not_found(self):
        response = self.client.get('/api/party-rate-slabs/resolve/', self._resolve_params(weightGrams=400))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'No Party Rate Slab found for this scenario')

    def test_weight_slab_bounds_validated(self):
        response = self.client.post('/api/weight-slabs/', {
            'slab_name': 'Broken', 'min_weight_grams': 900, 'max_weight_grams': 100,
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_negative_rate_rejected(self):
        response = self.client.post('/api/party-rate-slabs/', {
            'party': self.party.pk, 'shipment_type': 'DOCUMENT', 'mode': self.mode.pk,
            'service_type': self.service_type.pk, 'distance_slab': self.distance_slab.pk,
            'slab': self.weight_slab.pk, 'rate': '-5.00',
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_masters_list(self):
        response = self.client.get('/api/modes/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 2)

    def test_delete_mode_in_use_conflicts(self):
        self.create_rate_slab(self.party)

        response = self.client.delete(f'/api/modes/{self.mode.pk}/')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(
            response.data['error'], 'Record is referenced by other records and cannot be deleted'
        )
        self.assertTrue(Mode.objects.filter(pk=self.mode.pk).exists())


# ===========================================
# Party quotations
# ===========================================

class TestPartyQuotations(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.acme = Party.objects.create(party_name='Acme Traders')
        self.beta = Party.objects.create(party_name='Beta Cargo')
        self.gamma = Party.objects.create(party_name='Gamma Exports')

    def test_post_upserts_by_package_type(self):
        first = self.client.post('/api/party-quotations/', {
            'party': self.acme.pk, 'package_type': 'DOCUMENT', 'rates': {'0-250g': 40},
        }, format='json')
        second = self.client.post('/api/party-quotations/', {
            'party': self.acme.pk, 'package_type': 'DOCUMENT ', 'rates': {'0-250g': 45},
        }, format='json')

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 201)
        self.assertEqual(first.data['id'], second.data['id'])
        quotation = PartyQuotation.objects.get()
        self.assertEqual(quotation.rates, {'0-250g': 45})
        self.assertEqual(quotation.updated_by, self.user)

    def test_empty_rates_rejected(self):
        response = self.client.post('/api/party-quotations/', {
            'party': self.acme.pk, 'package_type': 'DOCUMENT', 'rates': {},
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_list_by_party_and_delete(self):
        keep = QuotationService.upsert(self.acme, 'DOCUMENT', {'0-250g': 40})
        drop = QuotationService.upsert(self.acme, 'NON_DOCUMENT', {'0-500g': 90})
        QuotationService.upsert(self.beta, 'DOCUMENT', {'0-250g': 50})

        response = self.client.get('/api/party-quotations/', {'party': self.acme.pk})
        self.assertEqual(response.data['pagination']['total'], 2)

        response = self.client.delete(f'/api/party-quotations/{drop.pk}/')
        self.assertEqual(response.status_code, 204)
        self.assertEqual(list(self.acme.quotations.all()), [keep])

    def test_overview_flags_parties_with_quotations(self):
        QuotationService.upsert(self.beta, 'DOCUMENT', {'0-250g': 50})

        response = self.client.get('/api/party-quotations/overview/')

        rows = {row['party_name']: row for row in response.data['data']}
        self.assertTrue(rows['Beta Cargo']['has_quotation'])
        self.assertEqual(rows['Beta Cargo']['quotations'][0]['rates'], {'0-250g': 50})
        self.assertFalse(rows['Acme Traders']['has_quotation'])

    def test_copy_replaces_target_quotations(self):
        QuotationService.upsert(self.acme, 'DOCUMENT', {'0-250g': 40})
        QuotationService.upsert(self.acme, 'NON_DOCUMENT', {'0-500g': 90})
        QuotationService.upsert(self.beta, 'DOCUMENT', {'0-250g': 99})

        response = self.client.post('/api/party-quotations/copy/', {
            'source_party_id': self.acme.pk, 'target_party_ids': [self.beta.pk, self.gamma.pk, self.acme.pk],
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['copied_count'], 4)
        self.assertEqual(self.beta.quotations.get(package_type='DOCUMENT').rates, {'0-250g': 40})
        self.assertEqual(self.gamma.quotations.count(), 2)

    def test_copy_unknown_target_reported(self):
        QuotationService.upsert(self.acme, 'DOCUMENT', {'0-250g': 40})

        result = QuotationService.copy(self.acme, [999999])

        self.assertEqual(result['copied_count'], 0)
        self.assertEqual(result['results'][0]['error'], 'Party not found')

    def test_copy_without_source_quotations(self):
        response = self.client.post('/api/party-quotations/copy/', {
            'source_party_id': self.acme.pk, 'target_party_ids': [self.beta.pk],
        }, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'No quotations found for source party')


class TestQuotationDefaults(TestCase):

    def setUp(self):
        self.south = Region.objects.create(name='South')
        self.north = Region.objects.create(name='North')
        QuotationDefault.objects.create(
            region=self.south, package_type='DOCUMENT', min_weight_grams=0, max_weight_grams=250,
            base_rate=Decimal('35.00')
        )
        QuotationDefault.objects.create(
            region=self.north, package_type='DOCUMENT', min_weight_grams=0, max_weight_grams=250,
            base_rate=Decimal('45.00')
        )

    def test_upper_bound_inclusive(self):
        self.assertEqual(resolve_quotation_default(self.north, 'document', 250).base_rate, Decimal('45.00'))
        self.assertIsNone(resolve_quotation_default(self.north, 'DOCUMENT', 251))
        self.assertIsNone(resolve_quotation_default(self.north, 'DOCUMENT', 0))

    def test_without_region_lowest_region_wins(self):
        self.assertEqual(resolve_quotation_default(None, 'DOCUMENT', 100).region, self.south)

    def test_resolve_endpoint(self):
        user = User.objects.create_user(
            email='operator@example.com', password='testpass123', role=UserRole.BILLING_OPERATOR
        )
        client = APIClient()
        client.force_authenticate(user=user)

        response = client.get('/api/quotation-defaults/resolve/', {
            'regionId': self.north.pk, 'packageType': 'DOCUMENT', 'weightGrams': 200,
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['baseRate'], 45.0)
        self.assertEqual(response.data['data']['regionName'], 'North')

        response = client.get('/api/quotation-defaults/resolve/', {'packageType': 'DOCUMENT', 'weightGrams': 900})
        self.assertIsNone(response.data['data'])

        response = client.get('/api/quotation-defaults/resolve/', {'weightGrams': 200})
        self.assertEqual(response.status_code, 400)
