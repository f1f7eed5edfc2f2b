"""
Domain exceptions.

HTTP translation lives in studio.main; services raise these and never
build HTTP responses themselves.
"""
from typing import Optional


class StudioError(Exception):
    """Base class for all domain errors."""


class NotFoundError(StudioError):
    """A referenced record does not exist or does not belong to the claimed parent."""

    def __init__(self, entity: str, entity_id: Optional[object] = None):
        self.entity = entity
        self.entity_id = entity_id
        message = f"{entity} not found"
        if entity_id is not None:
            message = f"{entity} {entity_id} not found"
        super().__init__(message)


class ValidationError(StudioError):
    """Request data is well-formed but violates a domain rule."""


class ProviderSubmitError(StudioError):
    """The generation provider rejected a job at submission time."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(message)


class ProviderPollError(StudioError):
    """The provider could not be reached while polling.

    Distinct from a provider-reported failure: the record stays in flight.
    """

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(message)


class StorageRehostError(StudioError):
    """Copying media into durable storage failed. Always non-fatal."""


class GenerationError(StudioError):
    """A generation batch produced zero successful results."""
