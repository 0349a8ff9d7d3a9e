"""
BOOKINGS App - Slab gross quotes

The gross amount of a booking can be pre-filled from the quotation
defaults of the booking center's region:
    center (by city) -> region -> QuotationDefault(package_type,
    min_weight_grams < grams <= max_weight_grams) -> base_rate
"""

import logging
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Optional

from rates.models import Center
from rates.services.quotations import resolve_quotation_default
from .models import GrossAmountSource, weight_in_grams

logger = logging.getLogger(__name__)


@dataclass
class GrossQuote:
    gross_amount: Decimal
    region_id: int
    region_name: str
    package_type: str
    weight_grams: int
    quotation_default_id: int

    def to_dict(self):
        data = asdict(self)
        data['gross_amount'] = float(self.gross_amount)
        return data


def quote_gross_amount(center, package_type, weight, weight_unit='kg') -> Optional[GrossQuote]:
    """
    Slab gross amount for a booking, or None when no quotation applies.

    `center` is the center city as stored on the booking.
    """
    grams = weight_in_grams(weight, weight_unit)
    if not center or not package_type or grams is None:
        return None

    center_row = Center.objects.select_related('region').filter(
        city__iexact=str(center).strip()
    ).exclude(region__isnull=True).first()
    if center_row is None:
        return None

    quotation = resolve_quotation_default(center_row.region, package_type, grams)
    if quotation is None:
        return None

    return GrossQuote(
        gross_amount=quotation.base_rate,
        region_id=center_row.region.id,
        region_name=center_row.region.name,
        package_type=quotation.package_type,
        weight_grams=grams,
        quotation_default_id=quotation.id,
    )


def resolve_gross_amount(supplied, center, package_type, weight, weight_unit='kg'):
    """
    Decide the stored gross amount and its provenance.

    A missing gross takes the slab quote. A supplied gross equal to the
    quote is recorded as slab, anything else as manual.

    Returns:
        Tuple of (gross_amount or None, GrossAmountSource)
    """
    quote = quote_gross_amount(center, package_type, weight, weight_unit)
    if supplied is None:
        if quote is None:
            return None, GrossAmountSource.MANUAL
        return quote.gross_amount, GrossAmountSource.SLAB
    if quote is not None and Decimal(str(supplied)) == quote.gross_amount:
        return supplied, GrossAmountSource.SLAB
    if quote is not None:
        logger.info(f"Gross {supplied} overrides slab quote {quote.gross_amount} for center '{center}'")
    return supplied, GrossAmountSource.MANUAL
