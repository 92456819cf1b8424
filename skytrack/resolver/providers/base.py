"""
Common contract for metadata providers.

Every provider turns one key (transponder code or registration) into an
AircraftRecord within its timeout and never raises: timeouts, HTTP
failures, rate limiting and unreadable payloads are logged here and become
an empty record. Nothing is cached on failure, so the next resolution
retries the provider.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from skytrack.errors import (
    ProviderError,
    ProviderMalformedResponse,
    ProviderTimeout,
    UpstreamRateLimited,
)
from skytrack.resolver.records import AircraftRecord

logger = logging.getLogger(__name__)

TRANSPONDER_KEY = 'transponder'
REGISTRATION_KEY = 'registration'


def clean(value) -> Optional[str]:
    """Provider payloads use '', None and numbers interchangeably."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class MetadataProvider(ABC):
    """
    Base class for provider adapters.

    Subclasses implement _fetch() and may raise freely; fetch() applies the
    timeout and absorbs every failure.
    """

    name: str = 'provider'
    key_kind: str = REGISTRATION_KEY
    timeout: Optional[float] = 3.0
    photo_source: bool = False

    def __init__(self, timeout: Optional[float] = None):
        if timeout is not None:
            self.timeout = timeout
        self._calls = 0
        self._failures = 0
        self._rate_limited = 0
        self.last_error: Optional[ProviderError] = None

    @property
    def is_configured(self) -> bool:
        """Unconfigured providers are skipped by the pipeline, not called."""
        return True

    async def fetch(self, key: str) -> AircraftRecord:
        """Look up key; returns an empty record on any failure."""
        self._calls += 1
        try:
            if self.timeout is None:
                return await self._fetch(key)
            return await asyncio.wait_for(self._fetch(key), timeout=self.timeout)
        except asyncio.TimeoutError:
            self._record_failure(ProviderTimeout(self.name, f'no answer within {self.timeout}s for {key}'))
        except ProviderError as e:
            self._record_failure(e)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self._record_failure(ProviderError(self.name, f'request failed for {key}: {e}'))
        except (ValueError, KeyError, TypeError, AttributeError, IndexError) as e:
            self._record_failure(ProviderMalformedResponse(self.name, f'unreadable payload for {key}: {e}'))

        return AircraftRecord.empty()

    def _record_failure(self, error: ProviderError) -> None:
        self._failures += 1
        self.last_error = error
        if isinstance(error, UpstreamRateLimited):
            self._rate_limited += 1
            logger.warning(f'{self.name} rate limit exceeded: {error}')
        elif isinstance(error, (ProviderTimeout, ProviderMalformedResponse)):
            logger.warning(f'{error.__class__.__name__}: {error}')
        else:
            logger.error(f'{self.name} lookup failed: {error}')

    @abstractmethod
    async def _fetch(self, key: str) -> AircraftRecord:
        raise NotImplementedError

    @property
    def stats(self) -> dict:
        return {
            'configured': self.is_configured,
            'calls': self._calls,
            'failures': self._failures,
            'rate_limited': self._rate_limited,
        }


class HttpMetadataProvider(MetadataProvider):
    """Provider backed by a JSON HTTP API on a shared httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient, timeout: Optional[float] = None):
        super().__init__(timeout=timeout)
        self.client = client

    async def _get_json(self, url: str, **kwargs) -> Optional[dict]:
        """
        GET a JSON document.

        Returns None for 404 (nothing known about this aircraft). Raises
        UpstreamRateLimited on 429 and ProviderError on other non-success
        statuses.
        """
        response = await self.client.get(url, timeout=self.timeout, **kwargs)

        if response.status_code == 404:
            logger.debug(f'{self.name}: nothing found at {url}')
            return None
        if response.status_code == 429:
            raise UpstreamRateLimited(self.name, 'HTTP 429', status_code=429)
        if response.status_code != 200:
            raise ProviderError(self.name, f'HTTP {response.status_code}', status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderMalformedResponse(self.name, f'invalid JSON: {e}') from e

        if data is not None and not isinstance(data, dict):
            raise ProviderMalformedResponse(self.name, f'expected an object, got {type(data).__name__}')
        return data
