"""
Aircraft metadata resolution core.

Combines static aircraft metadata from several unreliable providers into
one record per aircraft, with caching, request deduplication and bounded
concurrency.

Modules:
    identifiers  Transponder/callsign/registration normalization
    categories   Model string -> size/type category
    records      AircraftRecord and the per-field merge policy
    providers/   One adapter per external source
    pipeline     Provider orchestration and merging
    cache        TTL cache for merged records
    governor     Deduplication of in-flight resolutions and admission control
    service      AircraftResolver entry point and its background-loop runner
"""

from skytrack.resolver.categories import classify, describe
from skytrack.resolver.identifiers import (
    AircraftIdentifier,
    derive_registration_from_callsign,
    normalize_transponder_code,
)
from skytrack.resolver.pipeline import Resolution, ResolutionPipeline
from skytrack.resolver.records import AircraftRecord, merge_records
from skytrack.resolver.service import AircraftResolver, ResolveResult, ResolverRunner

__all__ = [
    'classify',
    'describe',
    'AircraftIdentifier',
    'derive_registration_from_callsign',
    'normalize_transponder_code',
    'Resolution',
    'ResolutionPipeline',
    'AircraftRecord',
    'merge_records',
    'AircraftResolver',
    'ResolveResult',
    'ResolverRunner',
]
