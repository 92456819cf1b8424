"""
Coarse aircraft category from a free-text model string.

Codes follow the ADS-B emitter categories the map already uses for icons:
A5 heavy, A3 medium, A2 regional/small jet, A1 light, B1 rotorcraft.

Rule groups are evaluated in a fixed order and the first group with a
matching substring wins. The Medium group contains broad family tokens
('A3', 'B7') that are checked before the Regional tokens, so an ambiguous
string such as 'A340 ATR' lands in Medium. That ordering is kept as is.
"""

from typing import Dict, Optional, Tuple

HEAVY = 'A5'
MEDIUM = 'A3'
REGIONAL = 'A2'
SMALL = 'A1'
HELICOPTER = 'B1'
UNKNOWN = 'unknown'

CATEGORY_LABELS: Dict[str, str] = {
    HEAVY: 'Heavy',
    MEDIUM: 'Medium',
    REGIONAL: 'Regional',
    SMALL: 'Small',
    HELICOPTER: 'Helicopter',
    UNKNOWN: 'Unknown',
}

# (category, tokens) in evaluation order
CATEGORY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (HEAVY, (
        'A350', 'A380', 'B747', 'B777', 'B787', 'B767',
        # Full "Boeing 7x7" names as the metadata providers spell them
        '747', '767', '777', '787',
    )),
    (MEDIUM, (
        'A3', 'B7', 'B757', 'A300', 'A310', 'MD80', 'MD90',
        'BOEING 7', 'MD-80', 'MD-90',
    )),
    (REGIONAL, (
        'E170', 'E175', 'E190', 'E195', 'E275', 'E290', 'E295',
        'CRJ', 'ATR', 'DASH8', 'Q400',
        'DASH 8', 'DHC-8', 'ERJ',
    )),
    (SMALL, (
        'CESSNA', 'PIPER', 'BEECHCRAFT', 'CIRRUS', 'DIAMOND', 'ROBIN',
    )),
    (HELICOPTER, (
        'HELICOPTER', 'ROTORCRAFT',
        'H125', 'H135', 'H145', 'H175',
        'AW139', 'AW169', 'AW189',
    )),
)


def classify(model: Optional[str]) -> str:
    """
    Map a model string to a category code.

    >>> classify('Boeing 777-300ER')
    'A5'
    >>> classify('ATR 72-600')
    'A2'
    >>> classify(None)
    'unknown'
    """
    if not model:
        return UNKNOWN

    model_upper = model.upper().strip()

    for category, tokens in CATEGORY_RULES:
        if any(token in model_upper for token in tokens):
            return category

    return UNKNOWN


def describe(category: Optional[str]) -> str:
    """Human-readable label for a category code."""
    return CATEGORY_LABELS.get(category or UNKNOWN, CATEGORY_LABELS[UNKNOWN])
