"""Tests for provider orchestration and merging."""

from types import SimpleNamespace

import pytest

from skytrack.errors import ProviderError
from skytrack.resolver.identifiers import AircraftIdentifier
from skytrack.resolver.pipeline import ResolutionPipeline
from skytrack.resolver.providers.base import TRANSPONDER_KEY
from skytrack.resolver.records import AircraftRecord


@pytest.fixture
def providers(make_provider):
    return SimpleNamespace(
        live=make_provider('opensky', key_kind=TRANSPONDER_KEY),
        photos=make_provider('planespotters', photo_source=True),
        store=make_provider('durable_store'),
        bulk=make_provider('bulk_dataset'),
        flightaware=make_provider('flightaware'),
        aviationstack=make_provider('aviationstack', configured=False),
    )


@pytest.fixture
def pipeline(providers):
    return ResolutionPipeline(
        live_metadata=providers.live,
        photos=providers.photos,
        durable_store=providers.store,
        bulk_dataset=providers.bulk,
        registries=[providers.flightaware, providers.aviationstack],
    )


def identify(**kwargs):
    return AircraftIdentifier.from_raw(**kwargs)


async def test_live_metadata_with_photo(pipeline, providers, call_log):
    providers.live.responses = {
        '48ae21': AircraftRecord(registration='SP-LRD', model='737-800', manufacturer='Boeing'),
    }
    providers.photos.responses = {
        'SP-LRD': AircraftRecord(photo_url='https://t/lrd.jpg', owner='Ignored Owner'),
    }

    resolution = await pipeline.run(identify(transponder_code='48ae21'))
    record = resolution.record

    assert call_log == [('opensky', '48ae21'), ('planespotters', 'SP-LRD')]
    assert record.registration == 'SP-LRD'
    assert record.photo_url == 'https://t/lrd.jpg'
    # Photo enrichment only contributes the photo
    assert record.owner is None
    assert resolution.sources['opensky'] == ['registration', 'model', 'manufacturer']
    assert resolution.sources['planespotters'] == ['photo_url']
    assert resolution.contributed('opensky')


async def test_store_fills_missing_model(pipeline, providers, call_log):
    providers.live.responses = {'48ae21': AircraftRecord(registration='SP-LRD')}
    providers.store.responses = {'SP-LRD': AircraftRecord(model='Boeing 737-800', owner='LOT')}

    record = (await pipeline.run(identify(transponder_code='48ae21'))).record

    assert call_log == [
        ('opensky', '48ae21'),
        ('durable_store', 'SP-LRD'),
        ('planespotters', 'SP-LRD'),
    ]
    assert record.model == 'Boeing 737-800'
    assert record.owner == 'LOT'
    assert record.category == 'A3'


async def test_model_without_registration_returns_early(pipeline, providers, call_log):
    providers.live.responses = {'48ae21': AircraftRecord(model='Boeing 777-300ER')}

    record = (await pipeline.run(identify(transponder_code='48ae21'))).record

    assert call_log == [('opensky', '48ae21')]
    assert record.category == 'A5'
    assert record.registration is None


async def test_full_fallback_order_and_precedence(pipeline, providers, call_log):
    providers.photos.responses = {
        'SP-LRD': AircraftRecord(photo_url='https://t/lrd.jpg', owner='Photo Owner'),
    }
    providers.store.responses = {
        'SP-LRD': AircraftRecord(model='Boeing 787-9', owner='Store Owner'),
    }
    providers.bulk.responses = {
        'SP-LRD': AircraftRecord(model='B789', operator='LOT'),
    }
    providers.flightaware.responses = {
        'SP-LRD': AircraftRecord(year_built='2016', operator='Ignored'),
    }

    resolution = await pipeline.run(identify(registration='sp-lrd'))
    record = resolution.record

    assert call_log == [
        ('planespotters', 'SP-LRD'),
        ('durable_store', 'SP-LRD'),
        ('bulk_dataset', 'SP-LRD'),
        ('flightaware', 'SP-LRD'),
    ]
    assert providers.aviationstack.calls == []
    assert record == AircraftRecord(
        registration='SP-LRD',
        model='Boeing 787-9',
        owner='Photo Owner',
        operator='LOT',
        year_built='2016',
        category='A5',
        photo_url='https://t/lrd.jpg',
    )
    assert resolution.sources['identifier'] == ['registration']


async def test_provider_registration_beats_supplied_one(pipeline, providers):
    providers.store.responses = {'SP-LRD': AircraftRecord(registration='SP-LRD (2)')}

    record = (await pipeline.run(identify(registration='SP-LRD'))).record

    assert record.registration == 'SP-LRD (2)'


async def test_registration_derived_from_callsign(pipeline, providers, call_log):
    providers.store.responses = {'SP-LRD': AircraftRecord(model='Cessna 172')}

    resolution = await pipeline.run(identify(transponder_code='48ae21', callsign='SPLRD'))
    record = resolution.record

    assert call_log == [
        ('opensky', '48ae21'),
        ('planespotters', 'SP-LRD'),
        ('durable_store', 'SP-LRD'),
        ('bulk_dataset', 'SP-LRD'),
        ('flightaware', 'SP-LRD'),
    ]
    assert record.registration == 'SP-LRD'
    assert record.category == 'A1'


async def test_raw_callsign_tried_for_photo_only(pipeline, providers, call_log):
    providers.photos.responses = {
        'LOT123': AircraftRecord(photo_url='https://t/lot.jpg', model='Not Trusted'),
    }

    record = (await pipeline.run(identify(transponder_code='48ae21', callsign='LOT123'))).record

    assert call_log == [('opensky', '48ae21'), ('planespotters', 'LOT123')]
    assert record == AircraftRecord(photo_url='https://t/lot.jpg', category='unknown')


async def test_photo_not_requeried_for_same_registration(pipeline, providers, call_log):
    providers.store.responses = {'SP-LRD': AircraftRecord(model='Boeing 737-800')}

    record = (await pipeline.run(identify(registration='SP-LRD'))).record

    assert [name for name, _ in call_log].count('planespotters') == 1
    assert record.photo_url is None


async def test_photo_lookup_for_newly_learned_registration(pipeline, providers, call_log):
    providers.store.responses = {'SP-LRD': AircraftRecord(registration='SP-LRE')}
    providers.photos.responses = {'SP-LRE': AircraftRecord(photo_url='https://t/lre.jpg')}

    record = (await pipeline.run(identify(registration='SP-LRD'))).record

    assert call_log[-1] == ('planespotters', 'SP-LRE')
    assert record.photo_url == 'https://t/lre.jpg'


async def test_all_providers_failing(pipeline, providers, call_log):
    for provider in (providers.live, providers.photos, providers.store, providers.bulk, providers.flightaware):
        provider.error = ProviderError(provider.name, 'down')

    resolution = await pipeline.run(identify(transponder_code='48ae21'))

    assert resolution.record == AircraftRecord.fallback()
    assert providers.live.stats['failures'] == 1


async def test_failures_do_not_stop_later_providers(pipeline, providers, call_log):
    providers.photos.error = ProviderError('planespotters', 'HTTP 500', status_code=500)
    providers.store.error = ProviderError('durable_store', 'query failed')
    providers.bulk.responses = {'SP-LRD': AircraftRecord(model='ATR 72-600')}

    record = (await pipeline.run(identify(registration='SP-LRD'))).record

    assert ('flightaware', 'SP-LRD') in call_log
    assert record.model == 'ATR 72-600'
    assert record.category == 'A2'


def test_providers_listing(pipeline, providers):
    assert [p.name for p in pipeline.providers] == [
        'opensky', 'planespotters', 'durable_store', 'bulk_dataset', 'flightaware', 'aviationstack',
    ]


def test_live_slot_needs_transponder_keyed_provider(providers):
    with pytest.raises(ValueError, match='durable_store'):
        ResolutionPipeline(providers.store, providers.photos, providers.store)


@pytest.mark.parametrize('slot', ['photos', 'durable_store', 'bulk_dataset', 'registries'])
def test_registration_slots_reject_transponder_keyed_provider(providers, slot):
    slots = {
        'live_metadata': providers.live,
        'photos': providers.photos,
        'durable_store': providers.store,
        'bulk_dataset': providers.bulk,
        'registries': [providers.flightaware],
    }
    slots[slot] = [providers.live] if slot == 'registries' else providers.live

    with pytest.raises(ValueError, match='opensky is keyed by transponder'):
        ResolutionPipeline(**slots)
