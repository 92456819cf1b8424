"""Tests for the Flask endpoints."""

from unittest.mock import Mock

import pytest

from skytrack.app import create_app
from skytrack.ingestion import StateVector
from skytrack.resolver.pipeline import ResolutionPipeline
from skytrack.resolver.providers.base import TRANSPONDER_KEY
from skytrack.resolver.records import AircraftRecord
from skytrack.resolver.service import AircraftResolver


def state(icao24, on_ground=False):
    return StateVector.from_array([
        icao24, 'LOT3KW', 'Poland', 1700000000, 1700000001,
        20.9, 52.1, 10972.8, on_ground, 230.5, 87.0, 0.0,
        None, 11049.0, '2631', False, 0,
    ])


@pytest.fixture
def opensky_client():
    client = Mock()
    client.get_states.return_value = [state('48ae21'), state('3c6444', on_ground=True)]
    return client


@pytest.fixture
def live(make_provider):
    return make_provider('opensky', key_kind=TRANSPONDER_KEY, responses={
        '48ae21': AircraftRecord(registration='SP-LRD', model='Boeing 787-9', manufacturer='Boeing'),
    })


@pytest.fixture
def app(make_provider, live, opensky_client):
    photos = make_provider('planespotters', photo_source=True)
    store = make_provider('durable_store')

    app = create_app(
        resolver_factory=lambda: AircraftResolver(ResolutionPipeline(live, photos, store)),
        opensky_client=opensky_client,
        init_database=False,
    )
    app.config['TESTING'] = True
    yield app
    app.config['RESOLVER_RUNNER'].stop()


@pytest.fixture
def client(app):
    return app.test_client()


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json() == {'status': 'ok', 'resolver': True}


def test_aircraft_info(client, live):
    response = client.get('/api/aircraft-info?icao24=48AE21')
    data = response.get_json()

    assert response.status_code == 200
    assert data['success'] is True
    assert data['cached'] is False
    assert data['data']['registration'] == 'SP-LRD'
    assert data['data']['category'] == 'A5'
    assert data['data']['categoryLabel'] == 'Heavy'
    assert data['data']['fullModelName'] == 'Boeing 787-9'
    assert data['data']['photoUrl'] is None
    assert data['sources']['opensky'] is True

    again = client.get('/api/aircraft-info?icao24=48ae21').get_json()
    assert again['cached'] is True
    assert live.calls == ['48ae21']


def test_unknown_aircraft_is_not_an_error(client):
    response = client.get('/api/aircraft-info?icao24=abcdef')

    assert response.status_code == 200
    assert response.get_json()['data'] == AircraftRecord.fallback().to_dict()


def test_callsign_only(client):
    response = client.get('/api/aircraft-info?callsign=SPLRD')

    assert response.status_code == 200
    assert response.get_json()['data']['registration'] == 'SP-LRD'


@pytest.mark.parametrize('query', ['', '?callsign=LOT123', '?icao24=nothex'])
def test_bad_identifiers(client, query):
    response = client.get(f'/api/aircraft-info{query}')

    assert response.status_code == 400
    assert 'error' in response.get_json()


def test_resolver_stats(client):
    client.get('/api/aircraft-info?icao24=48ae21')
    stats = client.get('/api/aircraft-info/stats').get_json()

    assert stats['cache']['entries'] == 1
    assert stats['providers']['opensky']['calls'] == 1


def test_flights(client, opensky_client):
    response = client.get('/api/flights?lamin=49&lomin=14.1&lamax=54.9&lomax=24.2')
    data = response.get_json()

    assert response.status_code == 200
    assert data['count'] == 2
    assert data['flights'][0]['icao24'] == '48ae21'
    bbox = opensky_client.get_states.call_args[0][0]
    assert bbox.lat_max == 54.9


def test_flights_airborne_only(client):
    data = client.get('/api/flights?lamin=49&lomin=14&lamax=55&lomax=24&airborne_only=true').get_json()
    assert [f['icao24'] for f in data['flights']] == ['48ae21']


def test_flights_requires_bbox(client):
    response = client.get('/api/flights?lamin=49')
    assert response.status_code == 400


def test_resolver_not_running(opensky_client):
    app = create_app(start_resolver=False, opensky_client=opensky_client, init_database=False)
    client = app.test_client()

    assert client.get('/api/aircraft-info?icao24=48ae21').status_code == 503
    assert client.get('/health').get_json()['resolver'] is False


def test_not_found(client):
    response = client.get('/api/nope')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Not found'}
