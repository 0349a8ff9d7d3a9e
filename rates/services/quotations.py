"""
Party quotations and regional quotation defaults.

A party quotation is the rate card quoted to one party for one package
type. Quotation defaults are the regional slab prices used to pre-fill
booking gross amounts.
"""

import logging
from typing import Optional

from django.db import transaction

from parties.models import Party
from ..models import PartyQuotation, QuotationDefault

logger = logging.getLogger('billing.audit')


class QuotationService:

    @staticmethod
    def upsert(party: Party, package_type: str, rates, user=None) -> PartyQuotation:
        """Create or replace the quotation of a party for a package type."""
        quotation, created = PartyQuotation.objects.get_or_create(
            party=party,
            package_type=package_type.strip(),
            defaults={'rates': rates, 'created_by': user, 'updated_by': user},
        )
        if not created:
            quotation.rates = rates
            quotation.updated_by = user
            quotation.save(update_fields=['rates', 'updated_by', 'updated_at'])
        logger.info(f"Quotation {'created' if created else 'updated'} for {party} / {quotation.package_type}")
        return quotation

    @classmethod
    @transaction.atomic
    def copy(cls, source: Party, target_ids, user=None) -> dict:
        """
        Copy every quotation of `source` onto each target party,
        replacing quotations the targets already have for the same
        package types.

        Returns:
            {'copied_count': int, 'results': [{target_party_id, package_type, status[, error]}]}
        """
        quotations = list(source.quotations.all())
        targets = Party.objects.in_bulk(target_ids)

        results = []
        copied = 0
        for target_id in target_ids:
            target = targets.get(target_id)
            for quotation in quotations:
                if target is None:
                    results.append({
                        'target_party_id': target_id,
                        'package_type': quotation.package_type,
                        'status': 'error',
                        'error': 'Party not found',
                    })
                    continue
                cls.upsert(target, quotation.package_type, quotation.rates, user=user)
                results.append({'target_party_id': target_id, 'package_type': quotation.package_type, 'status': 'ok'})
                copied += 1

        logger.info(f"Copied {copied} quotations from {source} to {len(target_ids)} parties")
        return {'copied_count': copied, 'results': results}

    @staticmethod
    def overview() -> list:
        """Every party with its quotations, by party name."""
        parties = Party.objects.prefetch_related('quotations').order_by('party_name')
        return [
            {
                'id': party.pk,
                'party_name': party.party_name,
                'contact_person': party.contact_person,
                'phone': party.phone,
                'email': party.email,
                'city': party.city,
                'state': party.state,
                'has_quotation': bool(party.quotations.all()),
                'quotations': [
                    {
                        'id': q.pk,
                        'package_type': q.package_type,
                        'rates': q.rates,
                        'created_at': q.created_at,
                        'updated_at': q.updated_at,
                    }
                    for q in sorted(party.quotations.all(), key=lambda q: q.package_type)
                ],
            }
            for party in parties
        ]


def resolve_quotation_default(region, package_type, grams) -> Optional[QuotationDefault]:
    """
    Default slab price for a package type and weight.

    Matches min_weight_grams < grams <= max_weight_grams. Without a region
    any region's default matches, lowest region first.
    """
    if not package_type or grams is None:
        return None
    defaults = QuotationDefault.objects.select_related('region').filter(
        package_type__iexact=str(package_type).strip(),
        min_weight_grams__lt=grams,
        max_weight_grams__gte=grams,
    )
    if region is not None:
        defaults = defaults.filter(region=region)
    return defaults.order_by('region_id', 'min_weight_grams').first()
