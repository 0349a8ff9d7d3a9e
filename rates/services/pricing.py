"""
Pricing Engine for the billing back-office

Computes slab-rate breakups (base, fuel, packing, handling, GST) and
resolves the party rate slab that applies to a consignment.

Formula (each step rounded to 2 decimals):
    fuel     = base * fuel_pct / 100
    subtotal = base + fuel + packing + handling
    gst      = subtotal * gst_pct / 100
    total    = subtotal + gst
"""

import logging
from dataclasses import dataclass, asdict
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Tuple

from django.conf import settings

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0.00')
TOLERANCE = Decimal('0.01')


def to_decimal(value) -> Decimal:
    """Coerce form/CSV/JSON input to Decimal; blanks and garbage become 0."""
    if value is None or value == '':
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value).replace(',', '').strip())
    except (InvalidOperation, ValueError):
        return ZERO
    if not result.is_finite():
        return ZERO
    return result


def round2(value) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def default_gst_pct() -> Decimal:
    return Decimal(str(settings.BILLING_DEFAULT_GST_PCT))


def first_positive(*candidates) -> Optional[Decimal]:
    """First candidate that parses to a value > 0."""
    for candidate in candidates:
        value = to_decimal(candidate)
        if value > 0:
            return value
    return None


@dataclass
class RateBreakup:
    """Priced consignment, stored as pricing_meta['rate_breakup']."""
    base: Decimal = ZERO
    fuel_pct: Decimal = ZERO
    fuel: Decimal = ZERO
    packing: Decimal = ZERO
    handling: Decimal = ZERO
    gst_pct: Decimal = ZERO
    gst: Decimal = ZERO
    subtotal: Decimal = ZERO
    total: Decimal = ZERO
    slab_name: str = ''

    @property
    def sgst(self) -> Decimal:
        return round2(self.gst / 2)

    @property
    def cgst(self) -> Decimal:
        return round2(self.gst - self.sgst)

    @property
    def half_gst_pct(self) -> Decimal:
        return round2(self.gst_pct / 2)

    @classmethod
    def from_meta(cls, data: Optional[dict]) -> 'RateBreakup':
        """
        Build from a stored rate_breakup dict.

        Accepts both camelCase (fuelPct, gstPct) and snake_case keys.
        Missing values stay 0; use `gst_inclusive_total` for fallbacks.
        """
        data = data or {}
        return cls(
            base=to_decimal(data.get('base')),
            fuel_pct=to_decimal(data.get('fuelPct', data.get('fuel_pct'))),
            fuel=to_decimal(data.get('fuel')),
            packing=to_decimal(data.get('packing')),
            handling=to_decimal(data.get('handling')),
            gst_pct=to_decimal(data.get('gstPct', data.get('gst_pct'))),
            gst=to_decimal(data.get('gst')),
            subtotal=to_decimal(data.get('subtotal')),
            total=to_decimal(data.get('total')),
            slab_name=data.get('slabName', data.get('slab_name', '')) or '',
        )

    def to_meta(self) -> dict:
        """JSON-safe dict in the stored pricing_meta layout."""
        return {
            'base': float(self.base),
            'fuelPct': float(self.fuel_pct),
            'fuel': float(self.fuel),
            'packing': float(self.packing),
            'handling': float(self.handling),
            'gstPct': float(self.gst_pct),
            'gst': float(self.gst),
            'subtotal': float(self.subtotal),
            'total': float(self.total),
        }

    def to_dict(self):
        return asdict(self)


class RateNotFound(Exception):
    """No active party rate slab matches the requested scenario."""


class PricingEngine:
    """
    Slab pricing calculator.

    GST defaults to settings.BILLING_DEFAULT_GST_PCT wherever a stored
    breakup has no positive GST percentage.
    """

    @property
    def default_gst_pct(self) -> Decimal:
        return default_gst_pct()

    def calculate_rate(
        self,
        base,
        fuel_pct=0,
        handling=0,
        gst_pct=0,
        slab_name: str = '',
        packing=0
    ) -> RateBreakup:
        """
        Calculate a full breakup from slab inputs.

        Args:
            base: Slab base rate
            fuel_pct: Fuel surcharge percentage applied to base
            handling: Flat handling charge
            gst_pct: GST percentage applied to the subtotal
            slab_name: Weight slab label, carried through for display
            packing: Flat packing charge

        Returns:
            RateBreakup with every amount rounded to 2 decimals
        """
        base = round2(base)
        fuel_pct = to_decimal(fuel_pct)
        gst_pct = to_decimal(gst_pct)
        packing = round2(packing)
        handling = round2(handling)

        fuel = round2(base * fuel_pct / 100)
        subtotal = round2(base + fuel + packing + handling)
        gst = round2(subtotal * gst_pct / 100)
        total = round2(subtotal + gst)

        return RateBreakup(
            base=base,
            fuel_pct=fuel_pct,
            fuel=fuel,
            packing=packing,
            handling=handling,
            gst_pct=gst_pct,
            gst=gst,
            subtotal=subtotal,
            total=total,
            slab_name=slab_name,
        )

    def complete_breakup(self, data) -> RateBreakup:
        """
        Fill the gaps of a stored breakup.

        subtotal falls back to base+fuel+packing+handling, gst_pct to the
        default GST, gst to subtotal*gst_pct/100.
        """
        rb = data if isinstance(data, RateBreakup) else RateBreakup.from_meta(data)
        parts = round2(rb.base + rb.fuel + rb.packing + rb.handling)
        subtotal = round2(rb.subtotal) if rb.subtotal > 0 else parts
        gst_pct = rb.gst_pct if rb.gst_pct > 0 else self.default_gst_pct
        gst = round2(rb.gst) if rb.gst > 0 else round2(subtotal * gst_pct / 100)
        return RateBreakup(
            base=round2(rb.base),
            fuel_pct=rb.fuel_pct,
            fuel=round2(rb.fuel),
            packing=round2(rb.packing),
            handling=round2(rb.handling),
            gst_pct=gst_pct,
            gst=gst,
            subtotal=subtotal,
            total=self.gst_inclusive_total(rb),
            slab_name=rb.slab_name,
        )

    def gst_inclusive_total(self, data) -> Decimal:
        """
        GST-inclusive total of a stored breakup.

        The stored total wins unless it is lower than the inferred
        subtotal + gst by more than one paisa.
        """
        rb = data if isinstance(data, RateBreakup) else RateBreakup.from_meta(data)
        subtotal = rb.subtotal if rb.subtotal > 0 else (rb.base + rb.fuel + rb.packing + rb.handling)
        gst_pct = rb.gst_pct if rb.gst_pct > 0 else self.default_gst_pct
        gst = rb.gst if rb.gst > 0 else subtotal * gst_pct / 100
        inferred = round2(subtotal + gst)
        if rb.total > 0 and rb.total >= inferred - TOLERANCE:
            return round2(rb.total)
        return inferred

    def breakup_from_slab(self, rate_slab) -> RateBreakup:
        """Price a PartyRateSlab row as-is."""
        return self.calculate_rate(
            base=rate_slab.rate,
            fuel_pct=rate_slab.fuel_pct,
            handling=rate_slab.handling,
            gst_pct=rate_slab.gst_pct,
            slab_name=rate_slab.slab.slab_name,
            packing=rate_slab.packing,
        )

    def resolve_party_rate(
        self,
        party,
        shipment_type: str,
        mode,
        service_type,
        distance_slab,
        weight_grams: Optional[int] = None,
        slab=None
    ) -> Tuple['PartyRateSlab', int]:
        """
        Find the party rate slab for a scenario.

        Falls back to any party with the same normalized name (most
        recently updated first) when the given party has no slab.

        Returns:
            Tuple of (PartyRateSlab, effective party id)

        Raises:
            RateNotFound: If no weight slab or rate slab matches
        """
        from rates.models import PartyRateSlab, WeightSlab

        if slab is None:
            if weight_grams is None:
                raise RateNotFound("Weight or slab is required")
            slab = WeightSlab.for_grams(weight_grams)
            if slab is None:
                raise RateNotFound("No matching weight slab")

        scenario = PartyRateSlab.objects.active().select_related('slab').filter(
            shipment_type=(shipment_type or '').upper(),
            mode=mode,
            service_type=service_type,
            distance_slab=distance_slab,
            slab=slab,
        )

        rate_slab = scenario.filter(party=party).order_by('-updated_at', '-id').first()
        if rate_slab is not None:
            return rate_slab, party.pk

        same_name = scenario.filter(
            party__in=party.__class__.objects.by_name(party.party_name)
        ).order_by('-updated_at', '-id').first()
        if same_name is not None:
            logger.info(
                f"Using rate slab of party {same_name.party_id} for '{party.party_name}' (name match)"
            )
            return same_name, same_name.party_id

        raise RateNotFound("No Party Rate Slab found for this scenario")


# Singleton instance
pricing_engine = PricingEngine()


def calculate_rate(base, fuel_pct=0, handling=0, gst_pct=0, slab_name='', packing=0) -> RateBreakup:
    return pricing_engine.calculate_rate(base, fuel_pct, handling, gst_pct, slab_name, packing)


def gst_inclusive_total(rate_breakup) -> Decimal:
    return pricing_engine.gst_inclusive_total(rate_breakup)
