"""
Distance category resolution from free-form Indian addresses.

The category (METRO_CITIES, WITHIN_STATE, OUT_OF_STATE, OTHER_STATE)
selects the distance slab of a party rate.
"""

import re
import logging
from dataclasses import dataclass, asdict
from typing import Optional

logger = logging.getLogger(__name__)

# Order matters: the first alias found in the address wins.
STATE_ALIASES = {
    'MAHARASHTRA': 'MH', 'MH': 'MH', 'BOMBAY': 'MH', 'MUMBAI': 'MH', 'PUNE': 'MH',
    'DELHI': 'DL', 'DL': 'DL', 'NEW DELHI': 'DL',
    'KARNATAKA': 'KA', 'KA': 'KA', 'BANGALORE': 'KA', 'BENGALURU': 'KA',
    'TAMIL NADU': 'TN', 'TN': 'TN', 'CHENNAI': 'TN', 'MADRAS': 'TN',
    'WEST BENGAL': 'WB', 'WB': 'WB', 'KOLKATA': 'WB', 'CALCUTTA': 'WB',
    'TELANGANA': 'TS', 'TS': 'TS', 'HYDERABAD': 'TS',
    'GUJARAT': 'GJ', 'GJ': 'GJ', 'AHMEDABAD': 'GJ',
    'UTTAR PRADESH': 'UP', 'UP': 'UP',
    'MADHYA PRADESH': 'MP', 'MP': 'MP',
    'RAJASTHAN': 'RJ', 'RJ': 'RJ',
    'HARYANA': 'HR', 'HR': 'HR',
    'PUNJAB': 'PB', 'PB': 'PB',
    'BIHAR': 'BR', 'BR': 'BR',
    'ODISHA': 'OD', 'ORISSA': 'OD', 'OD': 'OD',
    'JHARKHAND': 'JH', 'JH': 'JH',
    'CHHATTISGARH': 'CG', 'CG': 'CG',
    'ANDHRA PRADESH': 'AP', 'AP': 'AP',
    'ASSAM': 'AS', 'AS': 'AS',
    'KERALA': 'KL', 'KL': 'KL',
    'TELANGANA STATE': 'TS',
}

METRO_CITIES = [
    'MUMBAI', 'DELHI', 'PUNE', 'BENGALURU', 'BANGALORE',
    'CHENNAI', 'KOLKATA', 'HYDERABAD', 'AHMEDABAD',
]

PINCODE_RE = re.compile(r'\b\d{6}\b')
PINCODE_LIKE_RE = re.compile(r'\b\d{5,6}\b')
COUNTRY_SUFFIX_RE = re.compile(r'[-–,]*\s*\b(India|IN)$', re.IGNORECASE)
CITY_CATEGORY_RE = re.compile(r'(^|\b)(within|metro|other\s*state|out\s*of\s*state)(\b|$)')


@dataclass
class ParsedAddress:
    city: Optional[str] = None
    state_code: Optional[str] = None
    pincode: Optional[str] = None


@dataclass
class DistanceResolution:
    code: Optional[str] = None
    title: Optional[str] = None
    slab_id: Optional[int] = None
    origin_state: Optional[str] = None
    dest_state: Optional[str] = None
    is_neighbor: bool = False
    both_metro: bool = False

    def to_dict(self):
        return asdict(self)

    def to_meta(self) -> dict:
        return {
            'code': self.code,
            'title': self.title,
            'originState': self.origin_state,
            'destState': self.dest_state,
            'isNeighbor': self.is_neighbor,
            'bothMetro': self.both_metro,
        }


def _contains_alias(text: str, alias: str) -> bool:
    # Two-letter codes must stand alone ("UP" must not match "PUNE UPPER").
    if len(alias) <= 2:
        return re.search(rf'\b{alias}\b', text) is not None
    return alias in text


def parse_address_basic(address: Optional[str]) -> ParsedAddress:
    """Extract pincode, state code and metro city from an address."""
    text = (address or '').strip().upper()
    if not text:
        return ParsedAddress()

    pin_match = PINCODE_RE.search(text)
    pincode = pin_match.group(0) if pin_match else None

    state_code = None
    for alias, code in STATE_ALIASES.items():
        if _contains_alias(text, alias):
            state_code = code
            break

    city = None
    for candidate in METRO_CITIES:
        if candidate in text:
            city = 'Bengaluru' if candidate == 'BANGALORE' else candidate.capitalize()
            break

    return ParsedAddress(city=city, state_code=state_code, pincode=pincode)


def is_metro_city(city: Optional[str]) -> bool:
    from rates.models import MetroCity

    if not city:
        return False
    return MetroCity.objects.active().filter(city__iexact=city).exists()


def are_neighbor_states(a: Optional[str], b: Optional[str]) -> bool:
    """
    True when the pair is listed in either direction.

    With no neighbour data at all, different states count as neighbours
    so they price as OUT_OF_STATE.
    """
    from django.db.models import Q
    from rates.models import StateNeighbor

    if not a or not b:
        return False
    if not StateNeighbor.objects.exists():
        return True
    return StateNeighbor.objects.filter(
        Q(state_code=a, neighbor_state_code=b) | Q(state_code=b, neighbor_state_code=a)
    ).exists()


def resolve_distance_category(origin_address, dest_address) -> Optional[str]:
    return resolve_distance(origin_address, dest_address).code


def resolve_distance(origin_address, dest_address) -> DistanceResolution:
    """
    Categorise a sender/recipient address pair and look up its slab.

    Rules, first match wins:
        1. both cities are active metro cities -> METRO_CITIES
        2. same state -> WITHIN_STATE
        3. neighbouring states -> OUT_OF_STATE
        4. both states known -> OTHER_STATE
    """
    from rates.models import DistanceCategory, DistanceSlab

    origin = parse_address_basic(origin_address)
    dest = parse_address_basic(dest_address)
    result = DistanceResolution(origin_state=origin.state_code, dest_state=dest.state_code)

    result.both_metro = is_metro_city(origin.city) and is_metro_city(dest.city)
    if result.both_metro:
        result.code = DistanceCategory.METRO_CITIES
    elif origin.state_code and dest.state_code:
        if origin.state_code == dest.state_code:
            result.code = DistanceCategory.WITHIN_STATE
        elif are_neighbor_states(origin.state_code, dest.state_code):
            result.is_neighbor = True
            result.code = DistanceCategory.OUT_OF_STATE
        else:
            result.code = DistanceCategory.OTHER_STATE

    if result.code is None:
        return result

    slab = DistanceSlab.objects.filter(code=result.code).first()
    if slab is not None:
        result.title = slab.title
        result.slab_id = slab.pk
    else:
        logger.warning(f"Distance slab {result.code} is not configured")
    result.code = str(result.code)
    return result


def extract_city_from_address(address: Optional[str]) -> str:
    """Last comma-separated token that has letters and no pincode."""
    raw = (address or '').strip()
    if not raw:
        return ''
    parts = [p.strip() for p in raw.split(',') if p.strip()]
    if not parts:
        return ''
    for token in reversed(parts):
        if re.search(r'[A-Za-z]', token) and not PINCODE_LIKE_RE.search(token):
            city = COUNTRY_SUFFIX_RE.sub('', token).strip()
            if city:
                return city
    return parts[0]


def distance_display(region: Optional[str], recipient_address: Optional[str]) -> str:
    """
    Place-of-supply label.

    Category-style regions ("Within State", "Metro Cities", ...) show the
    recipient city instead.
    """
    value = (region or '').strip().lower()
    if CITY_CATEGORY_RE.search(value):
        return extract_city_from_address(recipient_address) or (region or '')
    return region or ''
