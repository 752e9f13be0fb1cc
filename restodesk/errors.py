"""Domain errors raised by services and translated to HTTP responses by routers"""

from typing import Optional


class RestoDeskError(Exception):
    """Base class for domain errors"""


class AuthenticationError(RestoDeskError):
    """Webhook signature missing or invalid"""


class NotFoundError(RestoDeskError):
    """Unknown tenant or record, or record owned by another tenant"""

    def __init__(self, resource: str, identifier: Optional[object] = None):
        self.resource = resource
        self.identifier = identifier
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} {identifier} not found"
        super().__init__(message)


class InvalidTransitionError(RestoDeskError):
    """Illegal status change"""

    def __init__(self, entity_type: str, current: str, requested: str):
        self.entity_type = entity_type
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move {entity_type} from '{current}' to '{requested}'"
        )


class UpstreamIntegrationError(RestoDeskError):
    """A third-party API (payment provider, automation platform) failed"""


class InsufficientMinutesError(RestoDeskError):
    """Minutes balance too low for the requested consumption"""
