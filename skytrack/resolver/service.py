"""
Aircraft metadata resolver - the single entry point callers use.

AircraftResolver owns its response cache, its concurrency governor, its
pipeline and the shared HTTP client. Nothing lives in module globals:
construct one per process (or per test) and close it with aclose().

ResolverRunner hosts a resolver on a dedicated event-loop thread so that
synchronous code (Flask views) can submit resolutions to it.
"""

import asyncio
import concurrent.futures
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from sqlalchemy.orm import Session

from skytrack.config import AppConfig, config as default_config
from skytrack.resolver.cache import ResponseCache
from skytrack.resolver.governor import ConcurrencyGovernor
from skytrack.resolver.identifiers import AircraftIdentifier
from skytrack.resolver.pipeline import Resolution, ResolutionPipeline
from skytrack.resolver.providers import (
    AviationStackRegistry,
    BulkDatasetProvider,
    DurableStoreProvider,
    FlightAwareRegistry,
    OpenSkyMetadataProvider,
    PlanespottersPhotoProvider,
)
from skytrack.resolver.records import AircraftRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveResult:
    """What a caller gets back from AircraftResolver.resolve()."""
    record: AircraftRecord
    cached: bool = False
    sources: Dict[str, List[str]] = field(default_factory=dict)

    def source_flags(self) -> Dict[str, bool]:
        return {name: bool(filled) for name, filled in self.sources.items()}


def _fallback_resolution() -> Resolution:
    return Resolution(record=AircraftRecord.fallback())


class AircraftResolver:
    """
    Resolves identifier bundles into merged aircraft records.

    Args:
        pipeline: Provider orchestration.
        cache_ttl_seconds: Lifetime of a merged record in the cache.
        max_concurrent: Cap on simultaneously running resolutions.
        strict_transponder_codes: Reject malformed transponder codes.
        client: HTTP client to close on aclose(), if the resolver owns it.
        clock: Time source for the cache.
    """

    def __init__(
        self,
        pipeline: ResolutionPipeline,
        cache_ttl_seconds: float = 300,
        max_concurrent: int = 20,
        strict_transponder_codes: bool = True,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.pipeline = pipeline
        self.strict_transponder_codes = strict_transponder_codes
        self.cache: ResponseCache[Resolution] = ResponseCache(cache_ttl_seconds, clock=clock)
        self.governor: ConcurrencyGovernor[Resolution] = ConcurrencyGovernor(max_concurrent)
        self._client = client

    @classmethod
    def from_config(
        cls,
        cfg: Optional[AppConfig] = None,
        session_factory: Optional[Callable[[], Session]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> 'AircraftResolver':
        """Wire up every provider from application configuration."""
        cfg = cfg or default_config
        owned_client = client is None
        if client is None:
            client = httpx.AsyncClient(follow_redirects=True)

        pipeline = ResolutionPipeline(
            live_metadata=OpenSkyMetadataProvider.from_config(client, cfg.opensky),
            photos=PlanespottersPhotoProvider.from_config(client, cfg.photos),
            durable_store=DurableStoreProvider(session_factory),
            bulk_dataset=BulkDatasetProvider.from_config(client, cfg.bulk_dataset),
            registries=[
                FlightAwareRegistry.from_config(client, cfg.flightaware),
                AviationStackRegistry.from_config(client, cfg.aviationstack),
            ],
        )

        configured = [r.name for r in pipeline.registries if r.is_configured]
        logger.info(f'Resolver initialized; optional registries configured: {configured or "none"}')

        return cls(
            pipeline,
            cache_ttl_seconds=cfg.resolver.cache_ttl_seconds,
            max_concurrent=cfg.resolver.max_concurrent,
            strict_transponder_codes=cfg.resolver.strict_transponder_codes,
            client=client if owned_client else None,
        )

    async def resolve(
        self,
        transponder_code: Optional[str] = None,
        callsign: Optional[str] = None,
        registration: Optional[str] = None,
    ) -> ResolveResult:
        """
        Resolve aircraft metadata, serving from cache when fresh.

        Raises:
            InsufficientIdentifier: nothing usable to resolve with
            InvalidIdentifier: malformed transponder code (strict mode)
        """
        identifier = AircraftIdentifier.from_raw(
            transponder_code=transponder_code,
            callsign=callsign,
            registration=registration,
            strict=self.strict_transponder_codes,
        )
        key = identifier.cache_key

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f'Returning cached aircraft info for {key}')
            return ResolveResult(record=cached.record, cached=True, sources=cached.sources)

        resolution = await self.governor.run(
            key,
            lambda: self._resolve_and_commit(identifier),
            fallback=_fallback_resolution,
        )
        return ResolveResult(record=resolution.record, cached=False, sources=resolution.sources)

    async def resolve_aircraft_info(
        self,
        transponder_code: Optional[str] = None,
        callsign: Optional[str] = None,
        registration: Optional[str] = None,
    ) -> AircraftRecord:
        """Merged record for the identifier bundle (possibly partially populated)."""
        result = await self.resolve(transponder_code, callsign, registration)
        return result.record

    async def _resolve_and_commit(self, identifier: AircraftIdentifier) -> Resolution:
        resolution = await self.pipeline.run(identifier)
        self.cache.set(identifier.cache_key, resolution)
        return resolution

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> 'AircraftResolver':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def stats(self) -> dict:
        return {
            'cache': self.cache.stats,
            'governor': self.governor.stats,
            'providers': {p.name: p.stats for p in self.pipeline.providers},
        }


class ResolverRunner:
    """
    Runs an AircraftResolver on a background event-loop thread.

    The resolver is constructed on that loop, so its asyncio primitives
    belong to it. Synchronous callers block on call() until the result is
    ready or call_timeout elapses; a timed-out resolution keeps running and
    still lands in the cache.
    """

    def __init__(
        self,
        resolver_factory: Callable[[], AircraftResolver],
        call_timeout: float = 30.0,
    ):
        self._factory = resolver_factory
        self.call_timeout = call_timeout
        self.resolver: Optional[AircraftResolver] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> 'ResolverRunner':
        if self.is_running:
            return self

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            name='aircraft-resolver',
            daemon=True,
        )
        self._thread.start()

        async def build() -> AircraftResolver:
            return self._factory()

        self.resolver = self.call(build)
        logger.info('Aircraft resolver loop started')
        return self

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def submit(self, coro_fn: Callable[[], Awaitable[Any]]) -> concurrent.futures.Future:
        if not self.is_running:
            raise RuntimeError('Resolver loop is not running')
        return asyncio.run_coroutine_threadsafe(coro_fn(), self._loop)

    def call(self, coro_fn: Callable[[], Awaitable[Any]], timeout: Optional[float] = None) -> Any:
        """
        Run coro_fn() on the resolver loop and wait for its result.

        Raises:
            concurrent.futures.TimeoutError: no result within the timeout
        """
        future = self.submit(coro_fn)
        return future.result(timeout=timeout if timeout is not None else self.call_timeout)

    def resolve(
        self,
        transponder_code: Optional[str] = None,
        callsign: Optional[str] = None,
        registration: Optional[str] = None,
    ) -> ResolveResult:
        return self.call(lambda: self.resolver.resolve(transponder_code, callsign, registration))

    def stats(self) -> dict:
        async def collect() -> dict:
            return self.resolver.stats

        return self.call(collect)

    def stop(self) -> None:
        if not self.is_running:
            return
        try:
            if self.resolver is not None:
                self.call(self.resolver.aclose)
        finally:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=5)
            self._loop.close()
            self._thread = None
            self._loop = None
            logger.info('Aircraft resolver loop stopped')
