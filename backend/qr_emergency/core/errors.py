"""
Error taxonomy for the emergency profile core.

Validation and upload problems are ``ValueError`` subclasses so routes can map
them to 400 responses. A token that fails to decode is not an error at all:
the codec returns a ``DecodeFailure`` value and callers fall back to the store.
"""
from dataclasses import dataclass


class ProfileValidationError(ValueError):
    """Registration input is missing or malformed."""


class PhotoRejected(ValueError):
    """Uploaded photo is not an image or is too large."""


class StoreUnavailable(Exception):
    """Durable write of an auxiliary store collection failed."""


@dataclass(frozen=True)
class DecodeFailure:
    """Token is not a self-contained profile."""
    reason: str
