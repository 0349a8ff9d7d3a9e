"""
BOOKINGS App - Account booking CSV upload

Rows are kept when SENDER NAME is a known party. A row is a duplicate
when its REFERENCE NUMBER is already stored (or appears earlier in the
file); rows without one are compared on date, sender, receiver, mobile
and net amount.
"""

import logging

from django.db import transaction
from django.db.models.functions import Lower, Trim
from django.utils import timezone

from core.csv_tools import TEXT, NUMBER, INTEGER, DATE, convert, fit_numbers, read_records
from core.exceptions import CsvImportError
from parties.models import Party
from .models import AccountBooking, WeightUnit, default_account_reference
from .services import resolve_gross_amount

logger = logging.getLogger('billing.audit')

REQUIRED_HEADERS = ['DATE OF BOOKING', 'SENDER NAME', 'RECEIVER NAME']

# (CSV header, model field, kind)
UPLOAD_COLUMNS = [
    ('DATE OF BOOKING', 'booking_date', DATE),
    ('SENDER NAME', 'sender', TEXT),
    ('CENTER', 'center', TEXT),
    ('RECEIVER NAME', 'receiver', TEXT),
    ('MOBILE', 'mobile', TEXT),
    ('CARRIER', 'carrier', TEXT),
    ('REFERENCE NUMBER', 'reference_number', TEXT),
    ('PACKAGE TYPE', 'package_type', TEXT),
    ('WEIGHT', 'weight', NUMBER),
    ('NUMBER OF BOXES', 'number_of_boxes', INTEGER),
    ('GROSS AMOUNT', 'gross_amount', NUMBER),
    ('OTHER CHARGES', 'other_charges', NUMBER),
    ('INSURANCE AMOUNT', 'insurance_amount', NUMBER),
    ('PARCEL VALUE', 'parcel_value', NUMBER),
    ('NET AMOUNT', 'net_amount', NUMBER),
    ('REMARKS', 'remarks', TEXT),
]

KILO_UNITS = {'kg', 'kgs', 'kilogram', 'kilograms'}


def weight_unit(value) -> str:
    """Upload files default to grams."""
    value = (value or '').strip().lower()
    if value in KILO_UNITS:
        return WeightUnit.KG
    return WeightUnit.G


def map_record(record: dict) -> dict:
    values = {field: convert(record.get(header), kind) for header, field, kind in UPLOAD_COLUMNS}
    for _, field, kind in UPLOAD_COLUMNS:
        if kind == TEXT and values[field] is None:
            values[field] = ''
    values['booking_date'] = values['booking_date'] or timezone.localdate()
    values['weight_unit'] = weight_unit(record.get('WEIGHT UNIT') or record.get('UNIT'))
    values['number_of_boxes'] = values['number_of_boxes'] or 1
    return values


def oversized_text(values: dict) -> list:
    """Headers whose text is longer than its column allows."""
    oversized = []
    for header, field_name, kind in UPLOAD_COLUMNS:
        max_length = AccountBooking._meta.get_field(field_name).max_length
        if kind == TEXT and max_length and len(values[field_name]) > max_length:
            oversized.append(header)
    return oversized


def soft_key(values: dict) -> tuple:
    return (
        values['booking_date'],
        values['sender'].strip().lower(),
        values['receiver'].strip().lower(),
        values['mobile'],
        values['net_amount'],
    )


def is_stored_soft_duplicate(values: dict) -> bool:
    return AccountBooking.objects.annotate(
        _sender=Lower(Trim('sender')), _receiver=Lower(Trim('receiver'))
    ).filter(
        booking_date=values['booking_date'],
        _sender=values['sender'].strip().lower(),
        _receiver=values['receiver'].strip().lower(),
        mobile=values['mobile'],
        net_amount=values['net_amount'],
    ).exists()


@transaction.atomic
def upload_account_bookings(content, user=None) -> dict:
    """
    Store the account bookings of an uploaded CSV.

    Raises:
        CsvImportError: empty file or missing required headers

    Returns:
        dict with uploaded_count, total_records, duplicate_count, duplicates,
        missing_party_count, missing_parties and invalid_rows
    """
    records = read_records(content)
    if not records:
        raise CsvImportError("No valid records found in CSV")

    available = list(records[0].keys())
    missing = [header for header in REQUIRED_HEADERS if header not in available]
    if missing:
        raise CsvImportError(
            "Missing required fields",
            diagnostics={'missing_fields': missing, 'available_headers': available},
        )

    party_names = set(
        Party.objects.annotate(_name=Lower(Trim('party_name'))).values_list('_name', flat=True)
    )
    seen_refs = set()
    seen_soft = set()
    duplicates = []
    missing_parties = []
    invalid_rows = []
    to_create = []

    for row, record in enumerate(records, start=1):
        values = map_record(record)
        if values['sender'].strip().lower() not in party_names:
            missing_parties.append({'row': row, 'party': values['sender']})
            continue

        invalid = fit_numbers(AccountBooking, UPLOAD_COLUMNS, values) + oversized_text(values)
        if invalid:
            invalid_rows.append({'row': row, 'reference': values['reference_number'], 'columns': invalid})
            continue

        values['gross_amount'], values['gross_amount_source'] = resolve_gross_amount(
            values['gross_amount'], values['center'], values['package_type'],
            values['weight'], values['weight_unit'],
        )
        booking = AccountBooking(created_by=user, **values)
        if booking.net_amount is None:
            booking.net_amount = values['net_amount'] = booking.compute_net_amount()

        reference = values['reference_number']
        if reference:
            if reference in seen_refs or AccountBooking.objects.filter(reference_number=reference).exists():
                duplicates.append({'row': row, 'reason': 'Duplicate reference number', 'reference': reference})
                continue
            seen_refs.add(reference)
        else:
            key = soft_key(values)
            if key in seen_soft or is_stored_soft_duplicate(values):
                duplicates.append({'row': row, 'reason': 'Duplicate booking'})
                continue
            seen_soft.add(key)
            booking.reference_number = f"{default_account_reference()}-{row}"

        to_create.append(booking)

    AccountBooking.objects.bulk_create(to_create)

    result = {
        'uploaded_count': len(to_create),
        'total_records': len(records),
        'duplicate_count': len(duplicates),
        'duplicates': duplicates,
        'missing_party_count': len(missing_parties),
        'missing_parties': missing_parties,
        'invalid_rows': invalid_rows,
    }
    logger.info(
        f"Account booking upload: {len(to_create)} of {len(records)} stored, {len(duplicates)} duplicates, "
        f"{len(missing_parties)} without party, {len(invalid_rows)} invalid"
        + (f" by {user}" if user else "")
    )
    return result
