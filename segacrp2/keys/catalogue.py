"""Catalogue of the known encrypted CPU parts and their key tables.

Six parts carry independent tables.  315-5177 was also fitted as 317-5000
(Fantasy Zone sound CPU) with the identical key.  The four 317-000x parts use an
almost identical key, each skipping 0 to 3 leading entries of one shared key
stream; this looks like keys taken from a PRNG with the part number choosing
how many bytes to skip.
"""

from __future__ import annotations

import enum
import functools
import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..engine import DecodeSummary
from ..exceptions import UnknownVariantError
from . import data
from .tables import KeyTable, MasterKeyTable

logger = logging.getLogger(__name__)

MASTER_317 = MasterKeyTable(
    xor_values=data.XOR_317_MASTER,
    selector_indices=data.SELECTORS_317_MASTER,
    label="317-000x",
)


@dataclass(frozen=True)
class VariantInfo:
    """Static description of one catalogued part."""

    part_number: str
    device: str
    description: str
    games: Tuple[str, ...]
    xor_values: Optional[Tuple[int, ...]] = None
    selector_indices: Optional[Tuple[int, ...]] = None
    shift: Optional[int] = None


class KeyVariant(enum.Enum):
    """Closed set of encrypted CPU parts, valued by part number."""

    NEC_315_5136 = "315-5136"
    SEGA_315_5162 = "315-5162"
    SEGA_315_5176 = "315-5176"
    SEGA_315_5177 = "315-5177"
    SEGA_315_5178 = "315-5178"
    SEGA_315_5179 = "315-5179"
    SEGA_317_5000 = "317-5000"
    SEGA_317_0004 = "317-0004"
    SEGA_317_0005 = "317-0005"
    SEGA_317_0006 = "317-0006"
    SEGA_317_0007 = "317-0007"

    @property
    def info(self) -> VariantInfo:
        return _VARIANT_INFO[self]

    @property
    def part_number(self) -> str:
        return self.value

    @property
    def device(self) -> str:
        return self.info.device

    @property
    def shift(self) -> Optional[int]:
        """Offset into the shared 317-000x key stream, ``None`` for standalone parts."""

        return self.info.shift

    @property
    def key_table(self) -> KeyTable:
        return _build_key_table(self)

    def decrypt(self, rom, decrypted, *, trace: bool = False) -> DecodeSummary:
        """Decode ``rom`` in place and fill ``decrypted`` with this part's key."""

        logger.info("decrypting with %s (%s)", self.part_number, self.device)
        return self.key_table.decode(rom, decrypted, trace=trace)


_VARIANT_INFO: Dict[KeyVariant, VariantInfo] = {
    KeyVariant.NEC_315_5136: VariantInfo(
        part_number="315-5136",
        device="nec_315_5136",
        description="NEC 315-5136",
        games=("New Lucky 8 Lines (set 7, W-4, encrypted)",),
        xor_values=data.XOR_315_5136,
        selector_indices=data.SELECTORS_315_5136,
    ),
    KeyVariant.SEGA_315_5162: VariantInfo(
        part_number="315-5162",
        device="sega_315_5162",
        description="Sega 315-5162",
        games=("4D Warriors", "Rafflesia", "Wonder Boy (set 4)"),
        xor_values=data.XOR_315_5162,
        selector_indices=data.SELECTORS_315_5162,
    ),
    KeyVariant.SEGA_315_5176: VariantInfo(
        part_number="315-5176",
        device="sega_315_5176",
        description="Sega 315-5176",
        games=("Wonder Boy (system 2 hardware, set 2)",),
        xor_values=data.XOR_315_5176,
        selector_indices=data.SELECTORS_315_5176,
    ),
    KeyVariant.SEGA_315_5177: VariantInfo(
        part_number="315-5177",
        device="sega_315_5177",
        description="Sega 315-5177",
        games=("Astro Flash", "Wonder Boy (set 1)"),
        xor_values=data.XOR_315_5177,
        selector_indices=data.SELECTORS_315_5177,
    ),
    KeyVariant.SEGA_315_5178: VariantInfo(
        part_number="315-5178",
        device="sega_315_5178",
        description="Sega 315-5178",
        games=("Wonder Boy (set 2)",),
        xor_values=data.XOR_315_5178,
        selector_indices=data.SELECTORS_315_5178,
    ),
    KeyVariant.SEGA_315_5179: VariantInfo(
        part_number="315-5179",
        device="sega_315_5179",
        description="Sega 315-5179",
        games=("Robo-Wrestle 2001",),
        xor_values=data.XOR_315_5179,
        selector_indices=data.SELECTORS_315_5179,
    ),
    KeyVariant.SEGA_317_5000: VariantInfo(
        part_number="317-5000",
        device="sega_317_5000",
        description="Sega 317-5000 (same key as 315-5177)",
        games=("Fantasy Zone (sound CPU)",),
        xor_values=data.XOR_315_5177,
        selector_indices=data.SELECTORS_315_5177,
    ),
    KeyVariant.SEGA_317_0004: VariantInfo(
        part_number="317-0004",
        device="sega_317_0004",
        description="Sega 317-0004",
        games=("Calorie Kun",),
        shift=0,
    ),
    KeyVariant.SEGA_317_0005: VariantInfo(
        part_number="317-0005",
        device="sega_317_0005",
        description="Sega 317-0005",
        games=("Space Position",),
        shift=1,
    ),
    KeyVariant.SEGA_317_0006: VariantInfo(
        part_number="317-0006",
        device="sega_317_0006",
        description="Sega 317-0006",
        games=("Gardia (set 1)",),
        shift=2,
    ),
    KeyVariant.SEGA_317_0007: VariantInfo(
        part_number="317-0007",
        device="sega_317_0007",
        description="Sega 317-0007",
        games=("Gardia (set 2)",),
        shift=3,
    ),
}


@functools.lru_cache(maxsize=None)
def _build_key_table(variant: KeyVariant) -> KeyTable:
    info = variant.info
    if info.shift is not None:
        return MASTER_317.window(info.shift, label=info.part_number)
    assert info.xor_values is not None and info.selector_indices is not None
    return KeyTable(
        xor_values=info.xor_values,
        selector_indices=info.selector_indices,
        label=info.part_number,
    )


_NON_ALNUM_RE = re.compile(r"[^0-9a-z]+")
_VENDOR_PREFIXES = ("sega", "nec")


def _normalise_name(name: str) -> str:
    cleaned = _NON_ALNUM_RE.sub("", str(name).strip().lower())
    for prefix in _VENDOR_PREFIXES:
        if cleaned.startswith(prefix):
            return cleaned[len(prefix) :]
    return cleaned


_ALIASES: Dict[str, KeyVariant] = {
    _normalise_name(variant.part_number): variant for variant in KeyVariant
}


def resolve_variant(name: str | KeyVariant) -> KeyVariant:
    """Return the variant named by part number, enum name or device name.

    ``"315-5177"``, ``"3155177"``, ``"SEGA_315_5177"`` and ``"sega_315_5177"``
    all resolve to :attr:`KeyVariant.SEGA_315_5177`.
    """

    if isinstance(name, KeyVariant):
        return name
    key = _normalise_name(name)
    variant = _ALIASES.get(key)
    if variant is None:
        raise UnknownVariantError(f"unknown encrypted CPU part: {name!r}")
    return variant


def shift_family() -> Tuple[KeyVariant, ...]:
    """Return the parts sharing the 317-000x master table, ordered by shift."""

    members = [variant for variant in KeyVariant if variant.shift is not None]
    return tuple(sorted(members, key=lambda variant: variant.shift or 0))


__all__ = [
    "KeyVariant",
    "MASTER_317",
    "VariantInfo",
    "resolve_variant",
    "shift_family",
]
