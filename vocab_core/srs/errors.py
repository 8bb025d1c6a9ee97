"""
Error types raised by the SRS package.
"""

from __future__ import annotations


class SRSError(Exception):
    """Base class for scheduler errors."""


class InvalidQuality(SRSError, ValueError):
    """Review quality outside the 0-5 grade scale."""

    def __init__(self, quality):
        self.quality = quality
        super().__init__(f"quality must be an integer between 0 and 5, got {quality!r}")


class StorageFailure(SRSError):
    """Reading or writing the record store failed."""


class ConfigurationError(SRSError, ValueError):
    """Scheduler settings are inconsistent or unparseable."""


class WriteConflict(StorageFailure):
    """Another writer changed the record between read and write."""
