"""Tests for AircraftRecord and the merge policy."""

from dataclasses import fields

from skytrack.resolver.records import (
    AircraftRecord,
    FIELD_POLICIES,
    FieldPolicy,
    merge_records,
)


def test_first_contribution_wins():
    acc = AircraftRecord(model='737-800')
    merged, changed = merge_records(acc, AircraftRecord(model='A320', owner='LOT'))

    assert merged.model == '737-800'
    assert merged.owner == 'LOT'
    assert changed == ['owner']


def test_null_never_clears_a_field():
    acc = AircraftRecord(registration='SP-LRD', model='737-800')
    merged, changed = merge_records(acc, AircraftRecord.empty())

    assert merged is acc
    assert changed == []


def test_photo_only_from_photo_sources():
    acc = AircraftRecord.empty()

    merged, changed = merge_records(acc, AircraftRecord(photo_url='https://x/1.jpg'))
    assert merged.photo_url is None
    assert changed == []

    merged, changed = merge_records(acc, AircraftRecord(photo_url='https://x/1.jpg'), photo_source=True)
    assert merged.photo_url == 'https://x/1.jpg'
    assert changed == ['photo_url']


def test_photo_is_idempotent():
    acc = AircraftRecord(photo_url='https://x/1.jpg')
    merged, _ = merge_records(acc, AircraftRecord(photo_url='https://x/2.jpg'), photo_source=True)
    assert merged.photo_url == 'https://x/1.jpg'


def test_category_is_never_merged():
    merged, changed = merge_records(AircraftRecord.empty(), AircraftRecord(category='A5'))
    assert merged.category is None
    assert changed == []
    assert FIELD_POLICIES['category'] is FieldPolicy.DERIVED


def test_every_field_has_a_policy():
    assert set(FIELD_POLICIES) == {f.name for f in fields(AircraftRecord)}


def test_fallback_record():
    record = AircraftRecord.fallback()
    assert record.category == 'unknown'
    assert record.populated_fields() == ['category']


def test_is_empty():
    assert AircraftRecord.empty().is_empty
    assert not AircraftRecord(owner='LOT').is_empty


def test_full_model_name():
    assert AircraftRecord(model='737-800', manufacturer='Boeing').full_model_name == 'Boeing 737-800'
    assert AircraftRecord(model='A320', manufacturer='A320').full_model_name == 'A320'
    assert AircraftRecord(model='A320').full_model_name == 'A320'
    assert AircraftRecord(model='Boeing 787-9', manufacturer='Boeing').full_model_name == 'Boeing 787-9'
    assert AircraftRecord(manufacturer='Boeing').full_model_name is None


def test_to_dict_uses_camel_case_keys():
    record = AircraftRecord(
        registration='SP-LRD',
        year_built='2016',
        engine_type='Turbofan',
        photo_url='https://x/1.jpg',
    )
    data = record.to_dict()

    assert data['registration'] == 'SP-LRD'
    assert data['yearBuilt'] == '2016'
    assert data['engineType'] == 'Turbofan'
    assert data['photoUrl'] == 'https://x/1.jpg'
    assert data['model'] is None
    assert data['fullModelName'] is None
    assert data['categoryLabel'] == 'Unknown'


def test_to_dict_labels_the_aircraft():
    data = AircraftRecord(model='737-800', manufacturer='Boeing', category='A3').to_dict()

    assert data['category'] == 'A3'
    assert data['categoryLabel'] == 'Medium'
    assert data['fullModelName'] == 'Boeing 737-800'
