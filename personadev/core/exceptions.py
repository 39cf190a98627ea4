"""
FILE: personadev/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - PersonaDevError (base exception)
  - ItemNotFoundError
  - InvalidInputError
  - ConfigurationMissingError
  - NetworkFailureError
  - MalformedSnapshotError
  - RemoteWriteFailureError
  - LocalStoreError
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - All exceptions inherit from PersonaDevError for easy catching
  - Service layer raises these, CLI catches and displays
  - SyncClient converts sync failures into status instead of raising
"""


class PersonaDevError(Exception):
    """Base exception for all PersonaDev errors."""
    pass


class ItemNotFoundError(PersonaDevError):
    """Tracked item with given ID doesn't exist."""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind.capitalize()} {item_id} not found")


class InvalidInputError(PersonaDevError):
    """Input validation failed."""

    def __init__(self, message: str):
        super().__init__(message)


class ConfigurationMissingError(PersonaDevError):
    """Relay has no remote store configured."""

    def __init__(self, message: str):
        super().__init__(message)


class NetworkFailureError(PersonaDevError):
    """Transport-level failure or non-success HTTP status talking to the relay."""

    def __init__(self, message: str, status: int = None):
        self.status = status
        super().__init__(message)


class MalformedSnapshotError(PersonaDevError):
    """Snapshot or response body does not have the expected structure."""

    def __init__(self, message: str):
        super().__init__(message)


class RemoteWriteFailureError(PersonaDevError):
    """Remote tabular store rejected an append or read."""

    def __init__(self, message: str):
        super().__init__(message)


class LocalStoreError(PersonaDevError):
    """Local replica database could not be opened, read or written."""

    def __init__(self, message: str):
        super().__init__(message)
