"""
Aircraft records and the field-by-field merge policy.

A provider contributes an AircraftRecord with whatever fields it knows; the
pipeline folds contributions into one merged record in priority order.
Precedence is declared per field in FIELD_POLICIES rather than implied by
the order of dict updates.
"""

import enum
import time
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional, Tuple

from skytrack.resolver.categories import describe


@dataclass(frozen=True)
class AircraftRecord:
    """
    Static metadata for one aircraft; every field is independently nullable.

    Used both for a single provider's partial contribution and for the
    merged result. Frozen, so a record handed to the cache is read-only.
    """
    registration: Optional[str] = None
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    owner: Optional[str] = None
    operator: Optional[str] = None
    year_built: Optional[str] = None
    engine_type: Optional[str] = None
    category: Optional[str] = None
    photo_url: Optional[str] = None

    @classmethod
    def empty(cls) -> 'AircraftRecord':
        return cls()

    @classmethod
    def fallback(cls) -> 'AircraftRecord':
        """Value shown while nothing is known: all null, category unknown."""
        return cls(category='unknown')

    @property
    def is_empty(self) -> bool:
        return not self.populated_fields()

    def populated_fields(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    @property
    def full_model_name(self) -> Optional[str]:
        """'Boeing 737-800' style label, or just the model."""
        if not self.model:
            return None
        if self.manufacturer and not self.model.upper().startswith(self.manufacturer.upper()):
            return f'{self.manufacturer} {self.model}'
        return self.model

    def to_dict(self) -> dict:
        """JSON shape served to the map UI."""
        return {
            'registration': self.registration,
            'model': self.model,
            'manufacturer': self.manufacturer,
            'owner': self.owner,
            'operator': self.operator,
            'yearBuilt': self.year_built,
            'engineType': self.engine_type,
            'category': self.category,
            'categoryLabel': describe(self.category),
            'fullModelName': self.full_model_name,
            'photoUrl': self.photo_url,
        }


class FieldPolicy(enum.Enum):
    FIRST_WINS = 'first_wins'
    # First wins, and only photo sources may set it
    PHOTO = 'photo'
    # Never taken from a provider; computed by the pipeline
    DERIVED = 'derived'


FIELD_POLICIES: Dict[str, FieldPolicy] = {
    'registration': FieldPolicy.FIRST_WINS,
    'model': FieldPolicy.FIRST_WINS,
    'manufacturer': FieldPolicy.FIRST_WINS,
    'owner': FieldPolicy.FIRST_WINS,
    'operator': FieldPolicy.FIRST_WINS,
    'year_built': FieldPolicy.FIRST_WINS,
    'engine_type': FieldPolicy.FIRST_WINS,
    'category': FieldPolicy.DERIVED,
    'photo_url': FieldPolicy.PHOTO,
}


def merge_records(
    accumulator: AircraftRecord,
    partial: AircraftRecord,
    *,
    photo_source: bool = False,
) -> Tuple[AircraftRecord, List[str]]:
    """
    Fold one provider's contribution into the accumulator.

    A field already set is never overwritten or cleared. Returns the new
    record and the names of the fields this contribution filled.
    """
    updates: Dict[str, Any] = {}

    for name, policy in FIELD_POLICIES.items():
        if policy is FieldPolicy.DERIVED:
            continue
        if policy is FieldPolicy.PHOTO and not photo_source:
            continue

        value = getattr(partial, name)
        if value is None or getattr(accumulator, name) is not None:
            continue
        updates[name] = value

    if not updates:
        return accumulator, []
    return replace(accumulator, **updates), list(updates)


@dataclass
class CacheEntry:
    """One cached value and when it was stored."""
    key: str
    value: Any
    inserted_at: float = field(default_factory=time.monotonic)

    def age(self, now: float) -> float:
        return now - self.inserted_at
