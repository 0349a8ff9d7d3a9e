"""
Money formatting for invoices and reports.

Indian digit grouping (12,34,567.89) and amounts in words using the
Crore / Lakh / Thousand / Hundred scale.
"""

from decimal import Decimal, ROUND_HALF_UP

from rates.services.pricing import to_decimal

ONES = [
    '', 'One', 'Two', 'Three', 'Four', 'Five', 'Six', 'Seven', 'Eight', 'Nine', 'Ten',
    'Eleven', 'Twelve', 'Thirteen', 'Fourteen', 'Fifteen', 'Sixteen', 'Seventeen',
    'Eighteen', 'Nineteen',
]
TENS = ['', '', 'Twenty', 'Thirty', 'Forty', 'Fifty', 'Sixty', 'Seventy', 'Eighty', 'Ninety']


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ','.join(pairs + [tail])


def inr_number(amount) -> str:
    """1234567.891 -> '12,34,567.89'"""
    value = to_decimal(amount).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    sign = '-' if value < 0 else ''
    whole, fraction = f"{abs(value):.2f}".split('.')
    return f"{sign}{_group_indian(whole)}.{fraction}"


def inr(amount) -> str:
    return f"INR {inr_number(amount)}"


def _two_digits(n: int) -> str:
    if n < 20:
        return ONES[n]
    return f"{TENS[n // 10]} {ONES[n % 10]}".strip()


def _integer_in_words(n: int) -> str:
    if n == 0:
        return 'Zero'

    crore, n = divmod(n, 10000000)
    lakh, n = divmod(n, 100000)
    thousand, n = divmod(n, 1000)
    hundred, rest = divmod(n, 100)

    words = ''
    if crore:
        words += f"{_integer_in_words(crore) if crore > 99 else _two_digits(crore)} Crore "
    if lakh:
        words += f"{_two_digits(lakh)} Lakh "
    if thousand:
        words += f"{_two_digits(thousand)} Thousand "
    if hundred:
        words += f"{ONES[hundred]} Hundred "
    if rest:
        words += ('and ' if words else '') + _two_digits(rest)
    return ' '.join(words.split())


def amount_in_words(amount) -> str:
    """
    1234.5 -> 'One Thousand Two Hundred and Thirty Four Rupees and Fifty Paisa only'
    """
    value = abs(to_decimal(amount)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    rupees = int(value)
    paise = int((value - rupees) * 100)

    text = f"{_integer_in_words(rupees)} Rupees"
    if paise:
        text += f" and {_integer_in_words(paise)} Paisa"
    return ' '.join(f"{text} only".split())
