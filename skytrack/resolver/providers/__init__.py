"""
Provider adapters for aircraft metadata.

Each adapter wraps one external source behind MetadataProvider.fetch(),
which applies the source's timeout and absorbs its failures.
"""

from skytrack.resolver.providers.base import MetadataProvider, HttpMetadataProvider
from skytrack.resolver.providers.bulk_dataset import BulkDatasetProvider, parse_dataset
from skytrack.resolver.providers.durable_store import DurableStoreProvider, lookup_by_registration
from skytrack.resolver.providers.opensky import OpenSkyMetadataProvider
from skytrack.resolver.providers.photos import PlanespottersPhotoProvider
from skytrack.resolver.providers.registries import AviationStackRegistry, FlightAwareRegistry

__all__ = [
    'MetadataProvider',
    'HttpMetadataProvider',
    'BulkDatasetProvider',
    'parse_dataset',
    'DurableStoreProvider',
    'lookup_by_registration',
    'OpenSkyMetadataProvider',
    'PlanespottersPhotoProvider',
    'AviationStackRegistry',
    'FlightAwareRegistry',
]
