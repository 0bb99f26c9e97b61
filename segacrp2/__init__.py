"""Decryption of program ROMs for the Sega 315-51xx / 317-000x encrypted CPUs."""

from .engine import ROM_SIZE, DecodeSummary, decode, row_for_address
from .exceptions import (
    ConfigError,
    DecryptionError,
    KeyTableError,
    RomImageError,
    UnknownVariantError,
)
from .keys import KeyTable, KeyVariant, MasterKeyTable, resolve_variant
from .permutations import PERMUTATIONS, permutation
from .rom import DecryptedImage, decrypt_image

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DecodeSummary",
    "DecryptedImage",
    "DecryptionError",
    "KeyTable",
    "KeyTableError",
    "KeyVariant",
    "MasterKeyTable",
    "PERMUTATIONS",
    "ROM_SIZE",
    "RomImageError",
    "UnknownVariantError",
    "decode",
    "decrypt_image",
    "permutation",
    "resolve_variant",
    "row_for_address",
]
