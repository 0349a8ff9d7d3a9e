"""
Apply slab rates to CSV consignment rows.

Each row is mapped onto the rate masters (mode, service type, distance
slab, weight slab, party) and priced with the matching PartyRateSlab.
The outcome is stored on the row as calculated_amount and pricing_meta.
"""

import logging
import re
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from rest_framework import status

from parties.models import Party
from rates.models import Mode, ServiceType, DistanceSlab, WeightSlab, ShipmentType
from rates.services.distance import resolve_distance
from rates.services.pricing import pricing_engine, RateNotFound
from ..exceptions import RatingError
from ..models import CsvInvoice

logger = logging.getLogger(__name__)

NON_ALNUM_RE = re.compile(r'[^A-Z0-9]+')


def to_grams(weight, chargeable_weight=None):
    """Kilograms -> whole grams; chargeable weight is used when weight is missing."""
    for value in (weight, chargeable_weight):
        if value is not None and Decimal(value) > 0:
            return int((Decimal(value) * 1000).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    return None


def match_master(model, raw):
    """
    Active master row for a CSV value.

    Tries the exact code, then the normalised code (NON DOCUMENT ->
    NON_DOCUMENT), then a case-insensitive title match.
    """
    code = (raw or '').strip().upper()
    if not code:
        return None
    active = model.objects.active()
    match = active.filter(code=code).first()
    if match is None:
        normalized = NON_ALNUM_RE.sub('_', code).strip('_')
        if normalized and normalized != code:
            match = active.filter(code=normalized).first()
    if match is None:
        match = active.filter(title__iexact=(raw or '').strip()).first()
    return match


class RatingService:
    """Prices CSV rows against party rate slabs."""

    @classmethod
    @transaction.atomic
    def apply_rate(cls, row: CsvInvoice) -> CsvInvoice:
        """
        Price one CSV row and store the result.

        Raises:
            RatingError: With the HTTP status and, for a missing rate slab,
                diagnostics describing the scenario
        """
        distance = resolve_distance(row.sender_address, row.recipient_address)

        mode = match_master(Mode, row.mode)
        if mode is None:
            raise RatingError("Mode not recognized", diagnostics={'received': row.mode})

        service_type = match_master(ServiceType, row.service_type)
        if service_type is None:
            raise RatingError("Service Type not recognized", diagnostics={'received': row.service_type})

        shipment_type = ShipmentType.DOCUMENT if mode.code == ShipmentType.DOCUMENT else ShipmentType.NON_DOCUMENT

        distance_slab = None
        if distance.slab_id:
            distance_slab = DistanceSlab.objects.filter(pk=distance.slab_id).first()
        if distance_slab is None and (row.region or '').strip():
            distance_slab = DistanceSlab.objects.filter(title__iexact=row.region.strip()).first()
        if distance_slab is None:
            raise RatingError("Unable to resolve distance category")

        grams = to_grams(row.weight, row.chargeable_weight)
        if not grams:
            raise RatingError("Weight not available to determine slab")

        weight_slab = WeightSlab.for_grams(grams)
        if weight_slab is None:
            raise RatingError("No matching weight slab")

        party_name = (row.sender_name or '').strip()
        if not party_name:
            raise RatingError("Sender/Party name missing")
        party = Party.objects.find_by_name(party_name)
        if party is None:
            raise RatingError("Party not found")

        try:
            rate_slab, effective_party_id = pricing_engine.resolve_party_rate(
                party=party,
                shipment_type=shipment_type,
                mode=mode,
                service_type=service_type,
                distance_slab=distance_slab,
                slab=weight_slab,
            )
        except RateNotFound as e:
            raise RatingError(
                str(e),
                status_code=status.HTTP_404_NOT_FOUND,
                diagnostics={
                    'party': party_name,
                    'party_id': party.pk,
                    'shipment_type': str(shipment_type),
                    'mode_id': mode.pk,
                    'service_type_id': service_type.pk,
                    'distance_slab_id': distance_slab.pk,
                    'weight_slab_id': weight_slab.pk,
                    'region_resolved': distance.title,
                    'grams': grams,
                    'origin_state': distance.origin_state,
                    'dest_state': distance.dest_state,
                    'is_neighbor': distance.is_neighbor,
                    'both_metro': distance.both_metro,
                    'distance_code': distance.code,
                },
            ) from e

        breakup = pricing_engine.breakup_from_slab(rate_slab)

        row.calculated_amount = breakup.total
        row.pricing_meta = {
            'source': 'party_rate_slab',
            'party_id': effective_party_id,
            'shipment_type': str(shipment_type),
            'mode_id': mode.pk,
            'service_type_id': service_type.pk,
            'distance_slab_id': distance_slab.pk,
            'weight_slab_id': weight_slab.pk,
            'distance': distance.to_meta(),
            'rate_breakup': breakup.to_meta(),
        }
        row.region = distance.title or row.region
        row.save(update_fields=['calculated_amount', 'pricing_meta', 'region', 'updated_at'])

        logger.info(f"Applied rate to {row}: {breakup.total} (slab {rate_slab.pk})")
        return row

    @classmethod
    def apply_rates(cls, ids=None) -> dict:
        """
        Price several rows; all unbilled rows when `ids` is empty.

        Returns:
            dict with applied count and failed [{id, error}]
        """
        rows = CsvInvoice.objects.all()
        rows = rows.filter(pk__in=ids) if ids else rows.unbilled()

        applied = 0
        failed = []
        for row in rows.order_by('created_at'):
            try:
                cls.apply_rate(row)
                applied += 1
            except RatingError as e:
                failed.append({'id': str(row.pk), 'error': e.message})

        logger.info(f"Bulk apply-rate: {applied} applied, {len(failed)} failed")
        return {'applied': applied, 'failed': failed}
