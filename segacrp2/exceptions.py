"""Custom exception hierarchy for the decryption helpers."""

from __future__ import annotations


class DecryptionError(Exception):
    """Base class for all decryption related errors."""


class KeyTableError(DecryptionError, ValueError):
    """Raised when a key table or selector index is malformed."""


class RomImageError(DecryptionError, ValueError):
    """Raised when a ROM buffer cannot be bound to the decode engine."""


class UnknownVariantError(DecryptionError, ValueError):
    """Raised when a part number does not match any catalogued key variant."""


class ConfigError(DecryptionError):
    """Raised when the run configuration is incomplete or unreadable."""


__all__ = [
    "ConfigError",
    "DecryptionError",
    "KeyTableError",
    "RomImageError",
    "UnknownVariantError",
]
