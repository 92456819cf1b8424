"""
OpenSky aircraft database CSV, searched by registration.

The whole dump is downloaded once, parsed into an in-memory index keyed by
registration, and shared by every lookup for 24 hours. A cold lookup pays
for the download and parse (10 s budget, parse on a worker thread); warm
lookups are a dict access.

Columns are positional and must match the upstream layout:
    0 icao24, 1 registration, 2 manufacturericao, 3 manufacturername,
    4 model, 5 typecode, 6 serialnumber, 7 linenumber, 8 icaoaircrafttype,
    9 operator, 10 operatorcallsign, 11 operatoricao, 12 operatoriata,
    13 owner, 14 testreg, 15 registered, 16 reguntil, 17 status, 18 built,
    19 firstflightdate, ...
The first row is a header and is skipped.
"""

import asyncio
import csv
import io
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import httpx

from skytrack.config import BulkDatasetConfig
from skytrack.errors import ProviderError, UpstreamRateLimited
from skytrack.resolver.providers.base import MetadataProvider, clean
from skytrack.resolver.records import AircraftRecord

logger = logging.getLogger(__name__)

COL_ICAO24 = 0
COL_REGISTRATION = 1
COL_MANUFACTURER_ICAO = 2
COL_MANUFACTURER_NAME = 3
COL_MODEL = 4
COL_TYPECODE = 5
COL_OPERATOR = 9
COL_OWNER = 13
COL_BUILT = 18

MIN_COLUMNS = 20

BULK_DATASET_TTL_SECONDS = 24 * 60 * 60


def _row_to_record(values) -> AircraftRecord:
    return AircraftRecord(
        registration=clean(values[COL_REGISTRATION]),
        model=clean(values[COL_MODEL]) or clean(values[COL_TYPECODE]),
        manufacturer=clean(values[COL_MANUFACTURER_NAME]) or clean(values[COL_MANUFACTURER_ICAO]),
        owner=clean(values[COL_OWNER]),
        operator=clean(values[COL_OPERATOR]),
        year_built=clean(values[COL_BUILT]),
    )


def parse_dataset(text: str) -> Dict[str, AircraftRecord]:
    """
    Parse the CSV dump into a registration index.

    Rows that are short or carry no registration are skipped. When a
    registration appears more than once the first row wins.
    """
    index: Dict[str, AircraftRecord] = {}
    reader = csv.reader(io.StringIO(text))

    next(reader, None)  # Header

    skipped = 0
    for values in reader:
        if len(values) < MIN_COLUMNS:
            skipped += 1
            continue
        registration = clean(values[COL_REGISTRATION])
        if not registration:
            continue
        index.setdefault(registration.upper(), _row_to_record(values))

    logger.debug(f'Bulk dataset parsed: {len(index)} registrations, {skipped} short rows skipped')
    return index


@dataclass
class BulkDataset:
    """Parsed dump plus the time it was loaded."""
    index: Dict[str, AircraftRecord]
    loaded_at: float = field(default_factory=time.monotonic)

    def get(self, registration: str) -> Optional[AircraftRecord]:
        return self.index.get(registration.upper())

    def __len__(self) -> int:
        return len(self.index)


class BulkDatasetProvider(MetadataProvider):
    """
    Provider over the CSV dump.

    Concurrent cold lookups share a single download. A failed download is
    not remembered; the next lookup tries again.
    """

    name = 'bulk_dataset'
    timeout = 10.0

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str = 'https://s3.opensky-network.org/data-samples/metadata/aircraftDatabase.csv',
        timeout: Optional[float] = None,
        ttl_seconds: float = BULK_DATASET_TTL_SECONDS,
        user_agent: str = 'SkyTrack aircraft metadata resolver',
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(timeout=timeout)
        self.client = client
        self.url = url
        self.ttl_seconds = ttl_seconds
        self.user_agent = user_agent
        self._clock = clock
        self._dataset: Optional[BulkDataset] = None
        self._load_lock = asyncio.Lock()
        self._downloads = 0

    @classmethod
    def from_config(cls, client: httpx.AsyncClient, cfg: BulkDatasetConfig) -> 'BulkDatasetProvider':
        return cls(
            client,
            url=cfg.url,
            timeout=cfg.timeout,
            ttl_seconds=cfg.ttl_seconds,
            user_agent=cfg.user_agent,
        )

    def _fresh_dataset(self) -> Optional[BulkDataset]:
        dataset = self._dataset
        if dataset is not None and self._clock() - dataset.loaded_at < self.ttl_seconds:
            return dataset
        return None

    async def fetch(self, key: str) -> AircraftRecord:
        # Warm lookups skip the cold-download timeout entirely
        dataset = self._fresh_dataset()
        if dataset is not None:
            self._calls += 1
            return dataset.get(key) or AircraftRecord.empty()
        return await super().fetch(key)

    async def _fetch(self, registration: str) -> AircraftRecord:
        dataset = await self.load()
        record = dataset.get(registration)
        if record is None:
            logger.debug(f'Bulk dataset: no aircraft for {registration} among {len(dataset)} rows')
            return AircraftRecord.empty()
        logger.debug(f'Bulk dataset: found {registration}: {record}')
        return record

    async def load(self) -> BulkDataset:
        """Return the cached dataset, downloading it if missing or stale."""
        dataset = self._fresh_dataset()
        if dataset is not None:
            return dataset

        async with self._load_lock:
            # Another caller may have finished the download while we waited
            dataset = self._fresh_dataset()
            if dataset is not None:
                return dataset

            logger.info(f'Downloading bulk aircraft dataset from {self.url}')
            response = await self.client.get(
                self.url,
                timeout=self.timeout,
                headers={'User-Agent': self.user_agent},
            )
            self._downloads += 1

            if response.status_code == 429:
                raise UpstreamRateLimited(self.name, 'HTTP 429', status_code=429)
            if response.status_code != 200:
                raise ProviderError(self.name, f'HTTP {response.status_code}', status_code=response.status_code)

            # The full dump takes seconds to parse
            index = await asyncio.to_thread(parse_dataset, response.text)
            self._dataset = BulkDataset(index=index, loaded_at=self._clock())
            logger.info(f'Bulk aircraft dataset loaded: {len(index)} registrations')
            return self._dataset

    def invalidate(self) -> None:
        self._dataset = None

    @property
    def stats(self) -> dict:
        stats = super().stats
        stats.update({
            'downloads': self._downloads,
            'loaded': self._dataset is not None,
            'registrations': len(self._dataset) if self._dataset else 0,
        })
        return stats
