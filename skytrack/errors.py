"""
Exception hierarchy for SkyTrack.

Only IdentifierError subclasses ever reach a caller of the resolver.
ProviderError subclasses are raised inside a provider adapter and caught at
the adapter boundary, where they become an empty contribution.
"""

from typing import Optional


class SkyTrackError(Exception):
    """Base class for all SkyTrack errors."""


class IdentifierError(SkyTrackError):
    """The caller supplied identifiers that cannot start a resolution."""


class InsufficientIdentifier(IdentifierError):
    """No transponder code, no registration and nothing derivable from the callsign."""


class InvalidIdentifier(IdentifierError):
    """An identifier was supplied but is malformed (e.g. not 6 hex chars)."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f'Invalid {kind}: {value!r}')


class ProviderError(SkyTrackError):
    """A single provider failed; absorbed by the adapter."""

    def __init__(self, provider: str, message: str = '', status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f'{provider}: {message}' if message else provider)


class ProviderTimeout(ProviderError):
    """Provider did not answer within its timeout."""


class ProviderMalformedResponse(ProviderError):
    """Provider answered with a payload we could not interpret."""


class UpstreamRateLimited(ProviderError):
    """Provider answered 429; not negatively cached so the next call retries."""
