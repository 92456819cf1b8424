"""
Configuration management for SkyTrack.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class OpenSkyConfig:
    """OpenSky Network API configuration."""
    client_id: Optional[str] = os.getenv('OPENSKY_CLIENT_ID') or None
    client_secret: Optional[str] = os.getenv('OPENSKY_CLIENT_SECRET') or None
    base_url: str = os.getenv('OPENSKY_BASE_URL', 'https://opensky-network.org/api')
    token_url: str = (
        'https://auth.opensky-network.org/auth/realms/opensky-network'
        '/protocol/openid-connect/token'
    )
    metadata_timeout: float = 3.0
    states_timeout: float = 30.0
    states_cache_seconds: int = 30  # Bounding-box responses


@dataclass(frozen=True)
class DatabaseConfig:
    """Durable store configuration."""
    url: str = os.getenv('DATABASE_URL', 'sqlite:///skytrack.db')


@dataclass(frozen=True)
class ResolverConfig:
    """Metadata resolution settings."""
    cache_ttl_seconds: int = int(os.getenv('RESOLVER_CACHE_TTL_SECONDS', '300'))
    max_concurrent: int = int(os.getenv('RESOLVER_MAX_CONCURRENT', '20'))

    # Strict: malformed transponder codes are rejected with InvalidIdentifier.
    # Permissive: they are passed through and the live-metadata lookup
    # simply finds nothing.
    strict_transponder_codes: bool = _env_flag('RESOLVER_STRICT_TRANSPONDER', '1')

    # How long a synchronous caller waits on the resolver loop
    call_timeout_seconds: float = float(os.getenv('RESOLVER_CALL_TIMEOUT_SECONDS', '30'))


@dataclass(frozen=True)
class BulkDatasetConfig:
    """OpenSky aircraft database CSV dump."""
    url: str = os.getenv(
        'BULK_DATASET_URL',
        'https://s3.opensky-network.org/data-samples/metadata/aircraftDatabase.csv',
    )
    timeout: float = 10.0  # Large file
    ttl_seconds: int = 24 * 60 * 60
    user_agent: str = 'SkyTrack aircraft metadata resolver'


@dataclass(frozen=True)
class PhotoConfig:
    """Planespotters photo API configuration."""
    base_url: str = 'https://api.planespotters.net/pub'
    timeout: float = 3.0


@dataclass(frozen=True)
class FlightAwareConfig:
    """FlightAware AeroAPI configuration (optional registry)."""
    api_key: Optional[str] = os.getenv('FLIGHTAWARE_API_KEY') or None
    base_url: str = 'https://aeroapi.flightaware.com/aeroapi'
    timeout: float = 3.0


@dataclass(frozen=True)
class AviationStackConfig:
    """AviationStack API configuration (optional registry)."""
    api_key: Optional[str] = os.getenv('AVIATIONSTACK_API_KEY') or None
    base_url: str = 'http://api.aviationstack.com/v1'
    timeout: float = 3.0


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    opensky: OpenSkyConfig = field(default_factory=OpenSkyConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    bulk_dataset: BulkDatasetConfig = field(default_factory=BulkDatasetConfig)
    photos: PhotoConfig = field(default_factory=PhotoConfig)
    flightaware: FlightAwareConfig = field(default_factory=FlightAwareConfig)
    aviationstack: AviationStackConfig = field(default_factory=AviationStackConfig)

    # Flask settings
    secret_key: str = 'dev-key-change-in-prod'
    debug: bool = False


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        opensky=OpenSkyConfig(),
        database=DatabaseConfig(),
        resolver=ResolverConfig(),
        bulk_dataset=BulkDatasetConfig(),
        photos=PhotoConfig(),
        flightaware=FlightAwareConfig(),
        aviationstack=AviationStackConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
