"""
Planespotters photo lookup by registration.

GET {base_url}/photos/reg/{registration}   -> at most one photo URL
GET {base_url}/aircraft/reg/{registration} -> optional airframe details

The large thumbnail is preferred over the standard one. The details
endpoint is unreliable upstream; its failure never costs us the photo.
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from skytrack.config import PhotoConfig
from skytrack.errors import ProviderError
from skytrack.resolver.providers.base import HttpMetadataProvider, clean
from skytrack.resolver.records import AircraftRecord

logger = logging.getLogger(__name__)


def select_photo_url(payload: Optional[dict]) -> Optional[str]:
    """First photo's large thumbnail, else its standard thumbnail."""
    if not payload:
        return None
    photos = payload.get('photos') or []
    if not photos:
        return None

    first = photos[0]
    for variant in ('thumbnail_large', 'thumbnail'):
        src = (first.get(variant) or {}).get('src')
        if src:
            return src
    return None


class PlanespottersPhotoProvider(HttpMetadataProvider):
    """Photo provider; the only source allowed to set photo_url."""

    name = 'planespotters'
    timeout = 3.0
    photo_source = True

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = 'https://api.planespotters.net/pub',
        timeout: Optional[float] = None,
        include_details: bool = True,
    ):
        super().__init__(client, timeout=timeout)
        self.base_url = base_url.rstrip('/')
        self.include_details = include_details

    @classmethod
    def from_config(cls, client: httpx.AsyncClient, cfg: PhotoConfig) -> 'PlanespottersPhotoProvider':
        return cls(client, base_url=cfg.base_url, timeout=cfg.timeout)

    async def _fetch(self, registration: str) -> AircraftRecord:
        reg = quote(registration, safe='')

        photos = await self._get_json(f'{self.base_url}/photos/reg/{reg}')
        photo_url = select_photo_url(photos)
        if photo_url:
            logger.debug(f'Planespotters photo for {registration}: {photo_url}')
        else:
            logger.debug(f'Planespotters: no photos for {registration}')

        details = AircraftRecord.empty()
        if self.include_details:
            details = await self._fetch_details(reg, registration)

        return AircraftRecord(
            model=details.model,
            manufacturer=details.manufacturer,
            owner=details.owner,
            operator=details.operator,
            year_built=details.year_built,
            photo_url=photo_url,
        )

    async def _fetch_details(self, reg: str, registration: str) -> AircraftRecord:
        try:
            data = await self._get_json(f'{self.base_url}/aircraft/reg/{reg}')
        except (ProviderError, httpx.HTTPError) as e:
            logger.debug(f'Planespotters aircraft details unavailable for {registration}: {e}')
            return AircraftRecord.empty()

        if not data or data.get('error') or not data.get('aircraft'):
            return AircraftRecord.empty()

        try:
            aircraft = data['aircraft'][0]
            return AircraftRecord(
                model=clean(aircraft.get('model')),
                manufacturer=clean(aircraft.get('manufacturer')),
                owner=clean(aircraft.get('owner')),
                operator=clean(aircraft.get('operator')),
                year_built=clean(aircraft.get('yearBuilt')),
            )
        except (ValueError, KeyError, TypeError, AttributeError, IndexError) as e:
            logger.debug(f'Planespotters aircraft details unreadable for {registration}: {e}')
            return AircraftRecord.empty()
