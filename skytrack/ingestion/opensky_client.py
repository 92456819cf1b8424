"""
OpenSky Network live-state client.

Handles communication with the OpenSky REST API, including:
- OAuth2 client-credentials authentication (optional, higher rate limits)
- Bounding box queries for geographic filtering
- A short per-box response cache
- Falling back to anonymous access, then to stale cached data

Each state vector arrives as a positional array whose order matches the
StateVector fields below. The trailing emitter category is only present
when the request asks for extended data.
"""

import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

import requests

from skytrack.config import OpenSkyConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    """
    Geographic bounding box for API queries.

    OpenSky expects: lamin, lomin, lamax, lomax
    (latitude min, longitude min, latitude max, longitude max)
    """
    lat_min: float
    lon_min: float
    lat_max: float
    lon_max: float

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> 'BoundingBox':
        """
        Build from lamin/lomin/lamax/lomax query parameters.

        Raises:
            ValueError: a parameter is missing, not a number, or the box is inverted
        """
        try:
            bbox = cls(
                lat_min=float(params['lamin']),
                lon_min=float(params['lomin']),
                lat_max=float(params['lamax']),
                lon_max=float(params['lomax']),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f'Bounding box requires lamin, lomin, lamax, lomax: {e}') from e

        if bbox.lat_min > bbox.lat_max or bbox.lon_min > bbox.lon_max:
            raise ValueError('Bounding box minimums must not exceed maximums')
        return bbox

    def to_params(self) -> dict:
        """Convert to OpenSky API query parameters."""
        return {
            'lamin': self.lat_min,
            'lomin': self.lon_min,
            'lamax': self.lat_max,
            'lomax': self.lon_max,
        }

    @property
    def cache_key(self) -> str:
        return f'{self.lat_min}-{self.lon_min}-{self.lat_max}-{self.lon_max}'


@dataclass
class StateVector:
    """
    Parsed state vector from OpenSky API.

    Normalizes the raw array format into a typed dataclass, keeping the
    upstream field order. All values may be None if not reported.
    """
    icao24: str
    callsign: Optional[str]
    origin_country: Optional[str]
    time_position: Optional[int]
    last_contact: Optional[int]
    longitude: Optional[float]
    latitude: Optional[float]
    baro_altitude: Optional[float]
    on_ground: bool
    velocity: Optional[float]
    true_track: Optional[float]
    vertical_rate: Optional[float]
    sensors: Optional[List[int]]
    geo_altitude: Optional[float]
    squawk: Optional[str]
    spi: bool
    position_source: Optional[int]
    category: Optional[int] = None

    @classmethod
    def from_array(cls, arr: List[Any]) -> Optional['StateVector']:
        """
        Parse OpenSky state vector array into StateVector object.

        Returns None if the array is malformed or missing required fields.
        The trailing category is optional.
        """
        if not arr or len(arr) < 17:
            return None

        icao24 = arr[0]
        if not icao24 or not isinstance(icao24, str):
            return None

        # Normalize callsign (strip whitespace, handle None)
        callsign = arr[1]
        if callsign:
            callsign = callsign.strip() or None

        return cls(
            icao24=icao24.lower(),
            callsign=callsign,
            origin_country=arr[2],
            time_position=arr[3],
            last_contact=arr[4],
            longitude=arr[5],
            latitude=arr[6],
            baro_altitude=arr[7],
            on_ground=bool(arr[8]),
            velocity=arr[9],
            true_track=arr[10],
            vertical_rate=arr[11],
            sensors=arr[12],
            geo_altitude=arr[13],
            squawk=arr[14],
            spi=bool(arr[15]),
            position_source=arr[16],
            category=arr[17] if len(arr) > 17 else None,
        )

    def has_position(self) -> bool:
        """Check if this state has valid position data."""
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> dict:
        return asdict(self)


class OpenSkyClient:
    """
    Client for the OpenSky /states/all endpoint.

    Tries an authenticated request when credentials are configured, then an
    anonymous one. Responses are cached per bounding box; when every attempt
    fails, the last cached response is returned even if stale.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        base_url: str = 'https://opensky-network.org/api',
        token_url: str = OpenSkyConfig.token_url,
        cache_seconds: float = 30,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.cache_seconds = cache_seconds
        self.timeout = timeout
        self.session = session or requests.Session()

        self._token: Optional[str] = None
        self._token_expires_at: float = 0
        # bbox key -> (timestamp, states)
        self._cache: Dict[str, Tuple[float, List[StateVector]]] = {}

        if self.is_authenticated:
            logger.info('OpenSky client initialized with client credentials')
        else:
            logger.warning('OpenSky client running without authentication (lower rate limits)')

    @classmethod
    def from_config(cls, cfg: OpenSkyConfig) -> 'OpenSkyClient':
        """Create client from application configuration."""
        return cls(
            client_id=cfg.client_id,
            client_secret=cfg.client_secret,
            base_url=cfg.base_url,
            token_url=cfg.token_url,
            cache_seconds=cfg.states_cache_seconds,
            timeout=cfg.states_timeout,
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _get_access_token(self) -> Optional[str]:
        """Client-credentials token, reused until shortly before expiry."""
        if self._token and time.time() < self._token_expires_at:
            return self._token

        response = self.session.post(
            self.token_url,
            data={
                'grant_type': 'client_credentials',
                'client_id': self.client_id,
                'client_secret': self.client_secret,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()

        self._token = payload.get('access_token')
        expires_in = int(payload.get('expires_in', 300))
        self._token_expires_at = time.time() + max(expires_in - 30, 0)
        return self._token

    def _request_states(self, bbox: Optional[BoundingBox], token: Optional[str]) -> List[StateVector]:
        headers = {'Authorization': f'Bearer {token}'} if token else {}
        response = self.session.get(
            f'{self.base_url}/states/all',
            params=bbox.to_params() if bbox else {},
            headers=headers,
            timeout=self.timeout,
        )

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError:
            if response.status_code == 429:
                logger.warning('OpenSky rate limit exceeded')
            else:
                logger.error(f'OpenSky API error: {response.status_code}')
            raise

        data = response.json()
        states_raw = data.get('states') or []
        logger.info(f'Received {len(states_raw)} state vectors from OpenSky')

        states = []
        for arr in states_raw:
            sv = StateVector.from_array(arr)
            if sv and sv.has_position():
                states.append(sv)
        return states

    def get_states(self, bbox: Optional[BoundingBox] = None) -> List[StateVector]:
        """
        Fetch current state vectors, optionally within a bounding box.

        Never raises for upstream failures: returns stale cached data for
        the same box if there is any, otherwise an empty list.
        """
        cache_key = bbox.cache_key if bbox else 'all'
        cached = self._cache.get(cache_key)
        if cached and time.time() - cached[0] < self.cache_seconds:
            logger.debug(f'Returning cached states for {cache_key}')
            return cached[1]

        if self.is_authenticated:
            try:
                token = self._get_access_token()
                states = self._request_states(bbox, token)
                self._cache[cache_key] = (time.time(), states)
                return states
            except (requests.RequestException, ValueError) as e:
                logger.warning(f'Authenticated OpenSky request failed, falling back to anonymous: {e}')

        try:
            states = self._request_states(bbox, None)
            self._cache[cache_key] = (time.time(), states)
            return states
        except (requests.RequestException, ValueError) as e:
            logger.error(f'All OpenSky state requests failed: {e}')

        if cached:
            logger.info(f'Returning stale cached states for {cache_key}')
            return cached[1]
        return []
