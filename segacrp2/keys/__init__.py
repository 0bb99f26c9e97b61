"""Key tables for the encrypted CPU parts."""

from .catalogue import MASTER_317, KeyVariant, VariantInfo, resolve_variant, shift_family
from .tables import KeyRow, KeyTable, MasterKeyTable

__all__ = [
    "KeyRow",
    "KeyTable",
    "KeyVariant",
    "MASTER_317",
    "MasterKeyTable",
    "VariantInfo",
    "resolve_variant",
    "shift_family",
]
