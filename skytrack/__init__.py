"""
SkyTrack Backend Package.

Aircraft metadata resolution service built with Flask, SQLAlchemy and httpx.

Modules:
    resolver/    Multi-provider metadata resolution with caching and deduplication
    models/      SQLAlchemy ORM models (AircraftMetadata durable store)
    ingestion/   OpenSky Network live-state client
    api/         REST endpoints for aircraft metadata and live flights
    config.py    Centralized configuration from environment variables
    errors.py    Exception hierarchy
"""

__version__ = '1.0.0'
