"""
CSV consignment import

Reads the carrier's booking export, keeps the rows whose SENDER NAME is a
known party and stores them as CsvInvoice rows. Rows whose booking
reference or consignment number is already stored are skipped.
"""

import csv
import io
import logging

from django.db import transaction
from django.db.models.functions import Lower, Trim

from core.csv_tools import (
    TEXT, NUMBER, INTEGER, DATE, convert, fit_numbers, header_row, read_records,
)
from core.exceptions import CsvImportError
from parties.models import Party
from rates.services.distance import resolve_distance
from ..models import CsvInvoice

logger = logging.getLogger('billing.audit')

# (CSV header, model field, kind) in template order
CSV_COLUMNS = [
    ('DATE OF BOOKING', 'booking_date', DATE),
    ('BOOKING REFERENCE', 'booking_reference', TEXT),
    ('CONSIGNMENT NO', 'consignment_no', TEXT),
    ('MODE', 'mode', TEXT),
    ('SERVICE TYPE', 'service_type', TEXT),
    ('WEIGHT (IN Kg)', 'weight', NUMBER),
    ('PREPAID AMOUNT', 'prepaid_amount', NUMBER),
    ('FINAL COLLECTED', 'final_collected', NUMBER),
    ('RETAIL PRICE', 'retail_price', NUMBER),
    ('SENDER NAME', 'sender_name', TEXT),
    ('SENDER PHONE', 'sender_phone', TEXT),
    ('SENDER ADDRESS', 'sender_address', TEXT),
    ('RECIPIENT NAME', 'recipient_name', TEXT),
    ('RECIPIENT PHONE', 'recipient_phone', TEXT),
    ('RECIPIENT ADDRESS', 'recipient_address', TEXT),
    ('MODE OF BOOKING', 'booking_mode', TEXT),
    ('SHIPMENT TYPE', 'shipment_type', TEXT),
    ('RISK SURCHARGE AMOUNT', 'risk_surcharge_amount', NUMBER),
    ('RISK SURCHARGE TYPE', 'risk_surcharge_type', TEXT),
    ('CONTENTS', 'contents', TEXT),
    ('DECLARED VALUE', 'declared_value', NUMBER),
    ('EWAY-BILL', 'eway_bill', TEXT),
    ('GSTInvoice', 'gst_invoice', TEXT),
    ('CUSTOMER', 'customer', TEXT),
    ('SERVICE CODE', 'service_code', TEXT),
    ('REGION', 'region', TEXT),
    ('PAYMENT MODE', 'payment_mode', TEXT),
    ('CHARGEABLE WEIGHT', 'chargeable_weight', NUMBER),
    ('PAYMENT UTR', 'payment_utr', TEXT),
    ('EMPLOYEE CODE', 'employee_code', TEXT),
    ('EMPLOYEE DISCOUNT PERCENT', 'employee_discount_percent', NUMBER),
    ('EMPLOYEE DISCOUNT AMOUNT', 'employee_discount_amount', NUMBER),
    ('PROMOCODE', 'promocode', TEXT),
    ('PROMOCODE DISCOUNT', 'promocode_discount', NUMBER),
    ('PACKING MATERIAL', 'packing_material', TEXT),
    ('NO OF STRETCH FILMS', 'no_of_stretch_films', INTEGER),
]

CSV_HEADERS = [header for header, _, _ in CSV_COLUMNS]


def map_record(record: dict) -> dict:
    """CSV record (keys already upper-cased) -> CsvInvoice field values."""
    return {
        field: convert(record.get(header.upper()), kind)
        for header, field, kind in CSV_COLUMNS
    }


def template_csv() -> str:
    """Header-only CSV in the import layout."""
    return header_row(CSV_HEADERS)


@transaction.atomic
def import_csv(content) -> dict:
    """
    Import CSV consignment rows.

    Returns:
        dict with inserted, skipped, skipped_no_party, skipped_duplicate,
        skipped_invalid and invalid_rows [{consignment_no, booking_reference, columns}]
    """
    records = read_records(content)
    if not records:
        raise CsvImportError("CSV is empty")

    party_names = set(
        Party.objects.annotate(_name=Lower(Trim('party_name'))).values_list('_name', flat=True)
    )
    existing_refs = set(
        CsvInvoice.objects.exclude(booking_reference__isnull=True).values_list('booking_reference', flat=True)
    )
    existing_cns = set(
        CsvInvoice.objects.exclude(consignment_no__isnull=True).values_list('consignment_no', flat=True)
    )

    to_create = []
    skipped_no_party = 0
    skipped_duplicate = 0
    invalid_rows = []

    for record in records:
        values = map_record(record)
        sender = (values['sender_name'] or '').strip().lower()
        if not sender or sender not in party_names:
            skipped_no_party += 1
            continue

        invalid = fit_numbers(CsvInvoice, CSV_COLUMNS, values)
        if invalid:
            invalid_rows.append({
                'consignment_no': values['consignment_no'],
                'booking_reference': values['booking_reference'],
                'columns': invalid,
            })
            continue

        ref, cn = values['booking_reference'], values['consignment_no']
        if (ref and ref in existing_refs) or (cn and cn in existing_cns):
            skipped_duplicate += 1
            continue
        if ref:
            existing_refs.add(ref)
        if cn:
            existing_cns.add(cn)

        distance = resolve_distance(values['sender_address'], values['recipient_address'])
        if distance.title:
            values['region'] = distance.title

        to_create.append(CsvInvoice(**values))

    CsvInvoice.objects.bulk_create(to_create)

    result = {
        'inserted': len(to_create),
        'skipped': skipped_no_party + skipped_duplicate + len(invalid_rows),
        'skipped_no_party': skipped_no_party,
        'skipped_duplicate': skipped_duplicate,
        'skipped_invalid': len(invalid_rows),
        'invalid_rows': invalid_rows,
    }
    logger.info(
        f"CSV import: inserted {result['inserted']}, skipped {skipped_no_party} without party, "
        f"{skipped_duplicate} duplicates, {len(invalid_rows)} with out-of-range numbers"
    )
    return result


def export_row_csv(row: CsvInvoice) -> str:
    """Single consignment as a two-line CSV in the import layout."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADERS)
    writer.writerow([
        '' if getattr(row, field) is None else getattr(row, field)
        for _, field, _ in CSV_COLUMNS
    ])
    return buffer.getvalue()
