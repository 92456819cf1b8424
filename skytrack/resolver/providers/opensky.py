"""
OpenSky aircraft metadata by transponder code.

GET {base_url}/metadata/aircraft/icao/{icao24}

Authoritative for registration and model when it knows the airframe.
Unknown airframes come back as 404 or as an empty object.
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from skytrack.config import OpenSkyConfig
from skytrack.resolver.providers.base import HttpMetadataProvider, TRANSPONDER_KEY, clean
from skytrack.resolver.records import AircraftRecord

logger = logging.getLogger(__name__)


class OpenSkyMetadataProvider(HttpMetadataProvider):
    """Live-metadata provider."""

    name = 'opensky'
    key_kind = TRANSPONDER_KEY
    timeout = 3.0

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = 'https://opensky-network.org/api',
        timeout: Optional[float] = None,
    ):
        super().__init__(client, timeout=timeout)
        self.base_url = base_url.rstrip('/')

    @classmethod
    def from_config(cls, client: httpx.AsyncClient, cfg: OpenSkyConfig) -> 'OpenSkyMetadataProvider':
        return cls(client, base_url=cfg.base_url, timeout=cfg.metadata_timeout)

    async def _fetch(self, icao24: str) -> AircraftRecord:
        data = await self._get_json(
            f'{self.base_url}/metadata/aircraft/icao/{quote(icao24.lower(), safe="")}'
        )

        if not data:
            logger.debug(f'OpenSky metadata: no data for {icao24}')
            return AircraftRecord.empty()

        record = AircraftRecord(
            registration=clean(data.get('registration')),
            model=clean(data.get('model')),
            manufacturer=clean(data.get('manufacturerName')),
            owner=clean(data.get('owner')),
            operator=clean(data.get('operator')),
            year_built=clean(data.get('yearBuilt') or data.get('built')),
            engine_type=clean(data.get('engineType') or data.get('engines')),
        )
        logger.debug(f'OpenSky metadata for {icao24}: {record}')
        return record
