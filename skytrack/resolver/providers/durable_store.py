"""
Read-only lookup against the durable aircraft_metadata store.

The query is synchronous SQLAlchemy; it runs on a worker thread so the
resolver's event loop keeps serving other resolutions. No timeout of its
own: the store bounds it.
"""

import asyncio
import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skytrack.errors import ProviderError
from skytrack.models import AircraftMetadata, SessionLocal
from skytrack.resolver.providers.base import MetadataProvider, clean
from skytrack.resolver.records import AircraftRecord

logger = logging.getLogger(__name__)


def lookup_by_registration(
    session_factory: Callable[[], Session],
    registration: str,
) -> Optional[AircraftRecord]:
    """Exact-match registration lookup; None when not found."""
    with session_factory() as session:
        row = session.query(AircraftMetadata).filter(
            AircraftMetadata.registration == registration
        ).first()

        if row is None:
            return None

        return AircraftRecord(
            registration=clean(row.registration),
            model=clean(row.display_model),
            manufacturer=clean(row.display_manufacturer),
            owner=clean(row.owner),
            operator=clean(row.operator),
            year_built=clean(row.built),
            engine_type=clean(row.engines),
        )


class DurableStoreProvider(MetadataProvider):
    """Provider over the local aircraft_metadata table."""

    name = 'durable_store'
    timeout = None

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        super().__init__()
        self.session_factory = session_factory or SessionLocal

    async def _fetch(self, registration: str) -> AircraftRecord:
        try:
            record = await asyncio.to_thread(lookup_by_registration, self.session_factory, registration)
        except SQLAlchemyError as e:
            raise ProviderError(self.name, f'query failed: {e}') from e

        if record is None:
            logger.debug(f'Durable store: no aircraft for {registration}')
            return AircraftRecord.empty()

        logger.debug(f'Durable store: found {registration}: {record}')
        return record
