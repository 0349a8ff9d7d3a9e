"""
CORE App - CSV upload helpers

Shared by the consignment import and the account booking bulk upload:
decoding, header normalisation, value parsing and column range checks.
"""

import csv
import io
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.db import models

from .exceptions import CsvImportError

TEXT, NUMBER, INTEGER, DATE = 'text', 'number', 'integer', 'date'

# Year-first, then day-first; month-first only as a last resort
DATE_FORMATS = (
    '%Y-%m-%d', '%Y/%m/%d',
    '%d-%m-%Y', '%d/%m/%Y', '%d.%m.%Y', '%d-%m-%y', '%d/%m/%y',
    '%d-%b-%Y', '%d %b %Y', '%m/%d/%Y',
)
INTEGER_LIMIT = 2147483647


def parse_date(value):
    value = (value or '').strip()
    if not value:
        return None
    for candidate in (value, value.split('T')[0].split(' ')[0]):
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(candidate, fmt).date()
            except ValueError:
                continue
    return None


def parse_number(value):
    value = (value or '').replace(',', '').strip()
    if not value:
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def convert(value, kind):
    if kind == DATE:
        return parse_date(value)
    if kind == NUMBER:
        return parse_number(value)
    if kind == INTEGER:
        number = parse_number(value)
        return int(number) if number is not None else None
    value = (value or '').strip()
    return value or None


def read_records(content) -> list:
    """Decode an uploaded file (bytes or text) into records keyed by upper-cased header."""
    if isinstance(content, bytes):
        try:
            content = content.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise CsvImportError("CSV must be UTF-8 encoded") from e
    content = content.lstrip('\ufeff')

    reader = csv.DictReader(io.StringIO(content))
    if reader.fieldnames:
        reader.fieldnames = [(name or '').strip().upper() for name in reader.fieldnames]
    try:
        records = [
            row for row in reader
            if any((value or '').strip() for value in row.values() if isinstance(value, str))
        ]
    except csv.Error as e:
        raise CsvImportError(f"CSV parsing failed: {e}") from e
    return records


def fit_numbers(model, columns, values: dict) -> list:
    """
    Round parsed numbers to their column scale in place.

    `columns` is a list of (CSV header, model field, kind). Returns the
    headers whose value does not fit the field's max_digits /
    decimal_places, or the integer range.
    """
    invalid = []
    for header, field_name, kind in columns:
        value = values.get(field_name)
        if value is None or kind not in (NUMBER, INTEGER):
            continue
        field = model._meta.get_field(field_name)
        if kind == INTEGER or not isinstance(field, models.DecimalField):
            if abs(value) > INTEGER_LIMIT or (isinstance(field, models.PositiveIntegerField) and value < 0):
                invalid.append(header)
            continue

        limit = Decimal(10) ** (field.max_digits - field.decimal_places)
        if abs(value) < limit:
            value = value.quantize(Decimal(1).scaleb(-field.decimal_places), rounding=ROUND_HALF_UP)
        if abs(value) >= limit:
            invalid.append(header)
            continue
        values[field_name] = value
    return invalid


def header_row(headers) -> str:
    """Header-only CSV."""
    buffer = io.StringIO()
    csv.writer(buffer).writerow(headers)
    return buffer.getvalue()
