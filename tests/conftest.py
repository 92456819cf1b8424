import asyncio
import os
from typing import Callable, Dict, List, Optional, Tuple

# Keep the module-level engine off the filesystem
os.environ.setdefault('DATABASE_URL', 'sqlite://')

import httpx  # noqa: E402
import pytest  # noqa: E402

from skytrack.models import (  # noqa: E402
    AircraftMetadata,
    Base,
    create_session_factory,
    create_store_engine,
)
from skytrack.resolver.providers.base import MetadataProvider, REGISTRATION_KEY  # noqa: E402
from skytrack.resolver.records import AircraftRecord  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider(MetadataProvider):
    """
    In-memory provider recording every call.

    responses maps key -> AircraftRecord; unknown keys return an empty
    record. `error` is raised from _fetch to exercise failure absorption.
    """

    def __init__(
        self,
        name: str,
        responses: Optional[Dict[str, AircraftRecord]] = None,
        photo_source: bool = False,
        configured: bool = True,
        delay: float = 0.0,
        error: Optional[Exception] = None,
        call_log: Optional[List[Tuple[str, str]]] = None,
        key_kind: str = REGISTRATION_KEY,
    ):
        super().__init__(timeout=5.0)
        self.name = name
        self.responses = responses or {}
        self.photo_source = photo_source
        self.configured = configured
        self.delay = delay
        self.error = error
        self.key_kind = key_kind
        self.calls: List[str] = []
        self.call_log = call_log if call_log is not None else []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def _fetch(self, key: str) -> AircraftRecord:
        self.calls.append(key)
        self.call_log.append((self.name, key))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.responses.get(key, AircraftRecord.empty())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def call_log() -> List[Tuple[str, str]]:
    return []


@pytest.fixture
def make_provider(call_log) -> Callable[..., FakeProvider]:
    def factory(name: str, **kwargs) -> FakeProvider:
        kwargs.setdefault('call_log', call_log)
        return FakeProvider(name, **kwargs)
    return factory


@pytest.fixture
async def make_client():
    """Build httpx clients backed by a MockTransport handler."""
    clients: List[httpx.AsyncClient] = []

    def factory(handler) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()


@pytest.fixture
def session_factory():
    """In-memory durable store with the aircraft_metadata table."""
    engine = create_store_engine('sqlite://')
    Base.metadata.create_all(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def add_aircraft(session_factory):
    def add(**columns) -> None:
        with session_factory() as session:
            session.add(AircraftMetadata(**columns))
            session.commit()
    return add
