"""Validated key tables bound to the decode engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

from ..engine import KEY_TABLE_LENGTH, ROW_COUNT, DecodeSummary, decode
from ..exceptions import KeyTableError
from ..permutations import PERMUTATION_COUNT, Permutation, permutation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyRow:
    """Opcode and data entries selected by one address row."""

    row: int
    opcode_selector: int
    opcode_xor: int
    data_selector: int
    data_xor: int

    @property
    def opcode_permutation(self) -> Permutation:
        return permutation(self.opcode_selector)

    @property
    def data_permutation(self) -> Permutation:
        return permutation(self.data_selector)


def _validate_entries(label: str, xor_values: Sequence[int], selector_indices: Sequence[int]) -> None:
    for index, value in enumerate(xor_values):
        if not isinstance(value, int) or not 0 <= value <= 0xFF:
            raise KeyTableError(f"{label}: xor entry {index} is not a byte: {value!r}")
    for index, value in enumerate(selector_indices):
        if not isinstance(value, int) or not 0 <= value < PERMUTATION_COUNT:
            raise KeyTableError(f"{label}: selector entry {index} out of range: {value!r}")


@dataclass(frozen=True)
class KeyTable:
    """One part's 128-entry XOR and permutation-selector tables."""

    xor_values: Tuple[int, ...]
    selector_indices: Tuple[int, ...]
    label: str = "custom"
    shift: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "xor_values", tuple(self.xor_values))
        object.__setattr__(self, "selector_indices", tuple(self.selector_indices))
        if len(self.xor_values) != KEY_TABLE_LENGTH:
            raise KeyTableError(
                f"{self.label}: xor table needs {KEY_TABLE_LENGTH} entries, got {len(self.xor_values)}"
            )
        if len(self.selector_indices) != KEY_TABLE_LENGTH:
            raise KeyTableError(
                f"{self.label}: selector table needs {KEY_TABLE_LENGTH} entries, "
                f"got {len(self.selector_indices)}"
            )
        _validate_entries(self.label, self.xor_values, self.selector_indices)

    @classmethod
    def from_master(
        cls,
        master_xor: Sequence[int],
        master_selectors: Sequence[int],
        shift: int,
        *,
        label: str = "custom",
    ) -> "KeyTable":
        """Return the 128-entry window starting ``shift`` entries into a master table."""

        if len(master_xor) != len(master_selectors):
            raise KeyTableError(
                f"{label}: master tables differ in length "
                f"({len(master_xor)} xor vs {len(master_selectors)} selectors)"
            )
        if shift < 0 or shift + KEY_TABLE_LENGTH > len(master_xor):
            raise KeyTableError(
                f"{label}: shift {shift} runs past the {len(master_xor)}-entry master table"
            )
        return cls(
            xor_values=tuple(master_xor[shift : shift + KEY_TABLE_LENGTH]),
            selector_indices=tuple(master_selectors[shift : shift + KEY_TABLE_LENGTH]),
            label=label,
            shift=shift,
        )

    def row_entry(self, row: int, *, opcode: bool) -> Tuple[int, int]:
        """Return ``(selector, xor)`` used for ``row`` on the opcode or data path."""

        if not 0 <= row < ROW_COUNT:
            raise KeyTableError(f"row out of range: {row!r}")
        index = 2 * row if opcode else 2 * row + 1
        return self.selector_indices[index], self.xor_values[index]

    def rows(self) -> Iterator[KeyRow]:
        for row in range(ROW_COUNT):
            yield KeyRow(
                row=row,
                opcode_selector=self.selector_indices[2 * row],
                opcode_xor=self.xor_values[2 * row],
                data_selector=self.selector_indices[2 * row + 1],
                data_xor=self.xor_values[2 * row + 1],
            )

    def decode(self, rom, decrypted, *, trace: bool = False) -> DecodeSummary:
        """Run the decode engine over ``rom`` with this table."""

        logger.debug("decoding with key table %s (shift=%d)", self.label, self.shift)
        return decode(rom, decrypted, self.xor_values, self.selector_indices, trace=trace)


@dataclass(frozen=True)
class MasterKeyTable:
    """A longer key stream shared by parts that skip a few leading entries."""

    xor_values: Tuple[int, ...]
    selector_indices: Tuple[int, ...]
    label: str = "master"

    def __post_init__(self) -> None:
        object.__setattr__(self, "xor_values", tuple(self.xor_values))
        object.__setattr__(self, "selector_indices", tuple(self.selector_indices))
        if len(self.xor_values) != len(self.selector_indices):
            raise KeyTableError(f"{self.label}: master xor and selector tables differ in length")
        if len(self.xor_values) < KEY_TABLE_LENGTH:
            raise KeyTableError(
                f"{self.label}: master table shorter than {KEY_TABLE_LENGTH} entries"
            )
        _validate_entries(self.label, self.xor_values, self.selector_indices)

    @property
    def max_shift(self) -> int:
        return len(self.xor_values) - KEY_TABLE_LENGTH

    def window(self, shift: int, *, label: str | None = None) -> KeyTable:
        return KeyTable.from_master(
            self.xor_values,
            self.selector_indices,
            shift,
            label=label or f"{self.label}+{shift}",
        )


__all__ = ["KeyRow", "KeyTable", "MasterKeyTable"]
