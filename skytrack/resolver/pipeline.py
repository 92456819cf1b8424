"""
Resolution pipeline - merges provider contributions into one aircraft record.

Stages, in order (later stages depend on fields set by earlier ones):
1. Primary: live metadata by transponder code.
2. Store fallback: durable store by registration when the model is missing.
3. Early return: with a registration or a model known, skip straight to
   photo enrichment to keep latency down.
4. Full fallback: pick a target registration (known, supplied, or derived
   from the callsign) and consult photos, durable store, bulk dataset and
   every configured registry.
5. Photo enrichment: one more photo lookup if a registration is known and
   no photo was found for it yet.
6. Classification of the merged model string.

The pipeline never raises once it has a valid identifier. Every provider
absorbs its own failures, so the worst case is an empty record with
category 'unknown'.
"""

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Set

from skytrack.resolver.categories import classify
from skytrack.resolver.identifiers import AircraftIdentifier
from skytrack.resolver.providers.base import (
    REGISTRATION_KEY,
    TRANSPONDER_KEY,
    MetadataProvider,
)
from skytrack.resolver.records import AircraftRecord, merge_records

logger = logging.getLogger(__name__)

PHOTO_ONLY = ('photo_url',)


@dataclass(frozen=True)
class Resolution:
    """Merged record plus which provider filled which fields."""
    record: AircraftRecord
    sources: Dict[str, List[str]] = field(default_factory=dict)
    duration_ms: float = 0.0

    def contributed(self, provider_name: str) -> bool:
        return bool(self.sources.get(provider_name))


class _ResolutionState:
    """Accumulator owned by a single run of the pipeline."""

    def __init__(self, identifier: AircraftIdentifier):
        self.identifier = identifier
        self.record = AircraftRecord.empty()
        self.sources: Dict[str, List[str]] = {}
        self.photo_keys: Set[str] = set()

    async def consult(
        self,
        provider: MetadataProvider,
        key: str,
        only: Optional[Iterable[str]] = None,
    ) -> List[str]:
        """Fetch from provider and merge; returns the fields it filled."""
        partial = await provider.fetch(key)

        if provider.photo_source:
            self.photo_keys.add(key)
        if only is not None:
            partial = AircraftRecord(**{name: getattr(partial, name) for name in only})

        return self.contribute(provider.name, partial, photo_source=provider.photo_source)

    def contribute(self, source: str, partial: AircraftRecord, photo_source: bool = False) -> List[str]:
        self.record, changed = merge_records(self.record, partial, photo_source=photo_source)
        self.sources.setdefault(source, []).extend(changed)
        if changed:
            logger.debug(f'{source} filled {changed} for {self.identifier.cache_key}')
        return changed


def _require_key_kind(provider: MetadataProvider, expected: str) -> None:
    if provider.key_kind != expected:
        raise ValueError(
            f'{provider.name} is keyed by {provider.key_kind}, but its pipeline slot needs {expected}'
        )


class ResolutionPipeline:
    """
    Orchestrates provider adapters in a fixed priority order.

    Args:
        live_metadata: Provider keyed by transponder code.
        photos: Photo provider keyed by registration.
        durable_store: Local store keyed by registration.
        bulk_dataset: CSV dump provider, consulted only in the full fallback.
        registries: Optional registries; unconfigured ones are skipped.
    """

    def __init__(
        self,
        live_metadata: MetadataProvider,
        photos: MetadataProvider,
        durable_store: MetadataProvider,
        bulk_dataset: Optional[MetadataProvider] = None,
        registries: Sequence[MetadataProvider] = (),
    ):
        _require_key_kind(live_metadata, TRANSPONDER_KEY)
        for provider in (photos, durable_store, bulk_dataset, *registries):
            if provider is not None:
                _require_key_kind(provider, REGISTRATION_KEY)

        self.live_metadata = live_metadata
        self.photos = photos
        self.durable_store = durable_store
        self.bulk_dataset = bulk_dataset
        self.registries = list(registries)

    @property
    def providers(self) -> List[MetadataProvider]:
        providers = [self.live_metadata, self.photos, self.durable_store]
        if self.bulk_dataset is not None:
            providers.append(self.bulk_dataset)
        return providers + self.registries

    async def run(self, identifier: AircraftIdentifier) -> Resolution:
        """Resolve one validated identifier into a merged record."""
        start_time = time.perf_counter()
        state = _ResolutionState(identifier)

        # Primary lookup
        if identifier.transponder_code:
            await state.consult(self.live_metadata, identifier.transponder_code)

        # Store fallback for a missing model
        if state.record.model is None and state.record.registration:
            await state.consult(self.durable_store, state.record.registration)

        if state.record.registration or state.record.model:
            logger.debug(f'Early return for {identifier.cache_key}: basic info already known')
        else:
            await self._full_fallback(state)

        await self._enrich_photo(state)

        record = replace(state.record, category=classify(state.record.model))

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f'Resolved {identifier.cache_key} in {duration_ms:.0f}ms: '
            f'registration={record.registration} model={record.model} category={record.category}'
        )
        return Resolution(record=record, sources=state.sources, duration_ms=duration_ms)

    async def _full_fallback(self, state: _ResolutionState) -> None:
        identifier = state.identifier
        target = state.record.registration or identifier.registration

        if target is None:
            target = identifier.derived_registration
            if target:
                logger.info(f'Derived registration {target} from callsign {identifier.callsign}')
            elif identifier.callsign:
                # Last resort: some callsigns are registrations without a known prefix
                logger.debug(f'Trying callsign {identifier.callsign} as a registration for photos')
                await state.consult(self.photos, identifier.callsign, only=PHOTO_ONLY)

        if target is None:
            logger.debug(f'No registration for {identifier.cache_key}; giving up on static metadata')
            return

        # Photos first so the photo is already set when later sources are merged
        await state.consult(self.photos, target)
        await state.consult(self.durable_store, target)
        if self.bulk_dataset is not None:
            await state.consult(self.bulk_dataset, target)

        for registry in self.registries:
            if not registry.is_configured:
                logger.debug(f'Skipping {registry.name}: not configured')
                continue
            await state.consult(registry, target)

        # The supplied or derived registration is the weakest evidence
        state.contribute('identifier', AircraftRecord(registration=target))

    async def _enrich_photo(self, state: _ResolutionState) -> None:
        registration = state.record.registration
        if state.record.photo_url is not None or registration is None:
            return
        if registration in state.photo_keys:
            return
        await state.consult(self.photos, registration, only=PHOTO_ONLY)
