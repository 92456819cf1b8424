"""
Aircraft identifier normalization.

Three identifiers reach the resolver:
- transponder code: ICAO24 hex address, lowercase, 6 chars (e.g. '48ae21')
- callsign: up to 8 chars as broadcast, often padded with spaces
- registration: civil tail number (e.g. 'SP-LRD')

General aviation traffic frequently broadcasts its registration as the
callsign without the dash ('SPLRD'). derive_registration_from_callsign()
recovers it using the nationality prefix table below. It is a heuristic:
the result is a fallback identifier, never ground truth.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, Optional

from skytrack.errors import InsufficientIdentifier, InvalidIdentifier

MAX_CALLSIGN_LENGTH = 8
MAX_SUFFIX_LENGTH = 3

_TRANSPONDER_RE = re.compile(r'^[0-9a-f]{6}$')
_SUFFIX_RE = re.compile(r'^[A-Z0-9]+$')

# Nationality registration marks (European), 1-2 characters
REGISTRATION_PREFIXES: FrozenSet[str] = frozenset({
    'D',   # Germany
    'F',   # France
    'G',   # United Kingdom
    'I',   # Italy
    '5B',  # Cyprus
    '9A',  # Croatia
    '9H',  # Malta
    'CS',  # Portugal
    'EC',  # Spain
    'EI',  # Ireland
    'ES',  # Estonia
    'HA',  # Hungary
    'HB',  # Switzerland
    'LN',  # Norway
    'LX',  # Luxembourg
    'LY',  # Lithuania
    'LZ',  # Bulgaria
    'OE',  # Austria
    'OH',  # Finland
    'OK',  # Czech Republic
    'OM',  # Slovakia
    'OO',  # Belgium
    'OY',  # Denmark
    'PH',  # Netherlands
    'S5',  # Slovenia
    'SE',  # Sweden
    'SP',  # Poland
    'SX',  # Greece
    'TF',  # Iceland
    'YL',  # Latvia
    'YR',  # Romania
    'YU',  # Serbia
})

_PREFIXES_LONGEST_FIRST = sorted(REGISTRATION_PREFIXES, key=len, reverse=True)


def normalize_transponder_code(code: Optional[str], strict: bool = True) -> Optional[str]:
    """
    Lowercase and trim a transponder code.

    In strict mode anything other than exactly 6 hex characters raises
    InvalidIdentifier. In permissive mode the trimmed value is passed
    through; the live-metadata provider then simply finds nothing.
    """
    if code is None:
        return None
    normalized = code.strip().lower()
    if not normalized:
        return None
    if strict and not _TRANSPONDER_RE.match(normalized):
        raise InvalidIdentifier('transponder code', code)
    return normalized


def normalize_callsign(callsign: Optional[str]) -> Optional[str]:
    """Strip padding and uppercase; empty callsigns become None."""
    if not callsign:
        return None
    cleaned = callsign.strip().upper()
    return cleaned[:MAX_CALLSIGN_LENGTH] or None


def normalize_registration(registration: Optional[str]) -> Optional[str]:
    if not registration:
        return None
    return registration.strip().upper() or None


def derive_registration_from_callsign(callsign: Optional[str]) -> Optional[str]:
    """
    Guess a registration from a callsign.

    The longest nationality prefix the callsign starts with is split off;
    the remainder must be 1-3 alphanumerics. 'SPLRD' -> 'SP-LRD',
    'SPLRD1' -> None (suffix too long), 'LOT123' -> None (no prefix).
    """
    if not callsign:
        return None

    clean = callsign.strip().upper()

    for prefix in _PREFIXES_LONGEST_FIRST:
        if clean.startswith(prefix):
            suffix = clean[len(prefix):]
            if 1 <= len(suffix) <= MAX_SUFFIX_LENGTH and _SUFFIX_RE.match(suffix):
                return f'{prefix}-{suffix}'
            # Only the longest matching prefix is considered
            return None

    return None


@dataclass(frozen=True)
class AircraftIdentifier:
    """
    Normalized identifier bundle for one resolution request.

    At least one of transponder_code, registration, or a registration
    derivable from the callsign is required.
    """
    transponder_code: Optional[str] = None
    callsign: Optional[str] = None
    registration: Optional[str] = None

    @classmethod
    def from_raw(
        cls,
        transponder_code: Optional[str] = None,
        callsign: Optional[str] = None,
        registration: Optional[str] = None,
        strict: bool = True,
    ) -> 'AircraftIdentifier':
        """
        Normalize raw caller input and validate it.

        Raises:
            InvalidIdentifier: malformed transponder code (strict mode)
            InsufficientIdentifier: nothing usable to resolve with
        """
        identifier = cls(
            transponder_code=normalize_transponder_code(transponder_code, strict=strict),
            callsign=normalize_callsign(callsign),
            registration=normalize_registration(registration),
        )
        if identifier.cache_key is None:
            raise InsufficientIdentifier(
                'A transponder code or registration is required '
                '(none supplied and none derivable from the callsign)'
            )
        return identifier

    @property
    def derived_registration(self) -> Optional[str]:
        return derive_registration_from_callsign(self.callsign)

    @property
    def cache_key(self) -> Optional[str]:
        """Key under which the merged record is cached and deduplicated."""
        return self.transponder_code or self.registration or self.derived_registration
