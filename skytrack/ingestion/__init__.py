"""
Live-state ingestion for SkyTrack.

Queries the OpenSky Network for current state vectors within a bounding
box. Consumed by the map layer; the metadata resolver does not depend on it.
"""

from skytrack.ingestion.opensky_client import BoundingBox, OpenSkyClient, StateVector

__all__ = ['BoundingBox', 'OpenSkyClient', 'StateVector']
