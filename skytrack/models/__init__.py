"""
Durable store models for SkyTrack.

The aircraft_metadata table is keyed for exact-match registration lookups;
the resolver treats it as a read-only collaborator.
"""

from skytrack.models.base import (
    Base,
    SessionLocal,
    create_session_factory,
    create_store_engine,
    engine,
    init_db,
)
from skytrack.models.aircraft import AircraftMetadata

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'create_session_factory',
    'create_store_engine',
    'init_db',
    'AircraftMetadata',
]
