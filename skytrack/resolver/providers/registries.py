"""
Optional third-party aircraft registries.

Each registry needs an API key. Without one it reports is_configured=False
and the pipeline skips it entirely rather than calling it.
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from skytrack.config import AviationStackConfig, FlightAwareConfig
from skytrack.resolver.providers.base import HttpMetadataProvider, clean
from skytrack.resolver.records import AircraftRecord

logger = logging.getLogger(__name__)


class KeyedRegistry(HttpMetadataProvider):
    """Registry that is only consulted when an API key is set."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str],
        base_url: str,
        timeout: Optional[float] = None,
    ):
        super().__init__(client, timeout=timeout)
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class FlightAwareRegistry(KeyedRegistry):
    """FlightAware AeroAPI aircraft lookup."""

    name = 'flightaware'

    @classmethod
    def from_config(cls, client: httpx.AsyncClient, cfg: FlightAwareConfig) -> 'FlightAwareRegistry':
        return cls(client, api_key=cfg.api_key, base_url=cfg.base_url, timeout=cfg.timeout)

    async def _fetch(self, registration: str) -> AircraftRecord:
        data = await self._get_json(
            f'{self.base_url}/aircraft/{quote(registration, safe="")}',
            headers={'x-apikey': self.api_key},
        )
        if not data:
            return AircraftRecord.empty()

        return AircraftRecord(
            model=clean(data.get('aircraft_type')),
            manufacturer=clean(data.get('manufacturer')),
            owner=clean(data.get('owner')),
            operator=clean(data.get('operator')),
            year_built=clean(data.get('year_built')),
        )


class AviationStackRegistry(KeyedRegistry):
    """AviationStack airplanes search."""

    name = 'aviationstack'

    @classmethod
    def from_config(cls, client: httpx.AsyncClient, cfg: AviationStackConfig) -> 'AviationStackRegistry':
        return cls(client, api_key=cfg.api_key, base_url=cfg.base_url, timeout=cfg.timeout)

    async def _fetch(self, registration: str) -> AircraftRecord:
        data = await self._get_json(
            f'{self.base_url}/airplanes',
            params={'access_key': self.api_key, 'search': registration},
        )
        if not data:
            return AircraftRecord.empty()

        if 'error' in data:
            logger.warning(f'AviationStack API error: {data["error"]}')
            return AircraftRecord.empty()

        airplanes = data.get('data') or []
        if not airplanes:
            logger.debug(f'AviationStack: no airplane found for {registration}')
            return AircraftRecord.empty()

        airplane = airplanes[0]
        return AircraftRecord(
            model=clean(airplane.get('airplane_name')),
            manufacturer=clean(airplane.get('manufacturer')),
            year_built=clean(airplane.get('year_built')),
        )
