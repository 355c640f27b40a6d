"""Exception types shared across the Archipelago package."""

from __future__ import annotations


class ArchipelagoError(Exception):
    """Base class for all errors raised by Archipelago.

    Attributes:
        code: Short machine-readable error code
    """

    code = "ARCHIPELAGO_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class ConfigurationError(ArchipelagoError):
    """Raised when a run configuration is out of range."""

    code = "INVALID_CONFIG"


class DatasetError(ArchipelagoError):
    """Raised when the (x, y) samples cannot be used for fitting."""

    code = "INVALID_DATASET"


class NotFittedError(ArchipelagoError):
    """Raised when results are requested before a run has completed."""

    code = "NOT_FITTED"
