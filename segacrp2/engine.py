"""Address-dependent decode engine for the 315-51xx / 317-000x CPUs.

Every byte in the 15-bit program space decodes two ways.  A 6-bit row built
from address bits 14, 12, 9, 6, 3 and 0 selects a pair of key entries: the even
entry (``2 * row``) decodes opcode fetches, the odd entry (``2 * row + 1``)
decodes data fetches.  Each entry is a permutation of the even data bits
followed by an XOR.

:func:`decode` fills the caller's opcode buffer and rewrites the ROM buffer in
place with the data decoding.  Inputs are validated before the loop starts;
the loop itself cannot fail.
"""

from __future__ import annotations

import ctypes
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from .exceptions import KeyTableError, RomImageError
from .permutations import PERMUTATIONS, PERMUTATION_COUNT, inverse_permutation, permute_byte

logger = logging.getLogger(__name__)

ROM_SIZE = 0x8000
ROW_ADDRESS_BITS = (14, 12, 9, 6, 3, 0)
ROW_COUNT = 1 << len(ROW_ADDRESS_BITS)
KEY_TABLE_LENGTH = 2 * ROW_COUNT


@dataclass(frozen=True)
class DecodeTraceEntry:
    """Record of the two decodings produced for one address."""

    address: int
    row: int
    source: int
    opcode: int
    data: int
    opcode_selector: int
    data_selector: int


@dataclass(frozen=True)
class DecodeSummary:
    """Counters collected while decoding a ROM image."""

    addresses: int
    opcode_writes: int
    data_writes: int
    changed_opcode_bytes: int
    changed_data_bytes: int
    rows_used: Dict[int, int] = field(default_factory=dict)


_LAST_TRACE: List[DecodeTraceEntry] = []


def last_decode_trace() -> List[DecodeTraceEntry]:
    """Return the trace collected during the most recent traced :func:`decode`."""

    return list(_LAST_TRACE)


def row_for_address(address: int) -> int:
    """Pack address bits 14, 12, 9, 6, 3, 0 (most significant first) into 0..63."""

    row = 0
    for bit in ROW_ADDRESS_BITS:
        row = (row << 1) | ((address >> bit) & 1)
    return row


def transform_byte(value: int, selector: int, xor: int) -> int:
    """Permute the even bits of ``value`` with catalogue entry ``selector``, then XOR."""

    return permute_byte(value, PERMUTATIONS[selector]) ^ xor


def encrypt_byte(plain: int, selector: int, xor: int) -> int:
    """Return the encrypted byte that :func:`transform_byte` decodes to ``plain``."""

    return permute_byte(plain ^ xor, inverse_permutation(PERMUTATIONS[selector]))


def _check_buffer(name: str, buffer) -> memoryview:
    try:
        view = memoryview(buffer)
    except TypeError as exc:
        raise RomImageError(f"{name} does not expose a byte buffer: {type(buffer)!r}") from exc
    if view.readonly:
        raise RomImageError(f"{name} buffer must be writable")
    if view.format != "B" or view.ndim != 1 or not view.contiguous:
        raise RomImageError(f"{name} buffer must be a flat byte buffer")
    if len(view) != ROM_SIZE:
        raise RomImageError(f"{name} buffer must be 0x{ROM_SIZE:04x} bytes, got 0x{len(view):04x}")
    return view


def _buffer_start(view: memoryview) -> int:
    return ctypes.addressof(ctypes.c_ubyte.from_buffer(view))


def _check_disjoint(rom_view: memoryview, out_view: memoryview) -> None:
    # views of one backing object may still be disjoint slices of it
    if rom_view.obj is not out_view.obj:
        return
    rom_start = _buffer_start(rom_view)
    out_start = _buffer_start(out_view)
    if rom_start < out_start + ROM_SIZE and out_start < rom_start + ROM_SIZE:
        raise RomImageError("rom and decrypted must not overlap")


def _check_tables(xor_table: Sequence[int], selector_table: Sequence[int]) -> None:
    if len(xor_table) < KEY_TABLE_LENGTH:
        raise KeyTableError(f"xor table needs {KEY_TABLE_LENGTH} entries, got {len(xor_table)}")
    if len(selector_table) < KEY_TABLE_LENGTH:
        raise KeyTableError(
            f"selector table needs {KEY_TABLE_LENGTH} entries, got {len(selector_table)}"
        )
    for index in range(KEY_TABLE_LENGTH):
        selector = selector_table[index]
        if not isinstance(selector, int) or not 0 <= selector < PERMUTATION_COUNT:
            raise KeyTableError(f"selector {index} out of range: {selector!r}")
        xor = xor_table[index]
        if not isinstance(xor, int) or not 0 <= xor <= 0xFF:
            raise KeyTableError(f"xor value {index} out of range: {xor!r}")


def decode(
    rom,
    decrypted,
    xor_table: Sequence[int],
    selector_table: Sequence[int],
    *,
    trace: bool = False,
) -> DecodeSummary:
    """Decode ``rom`` in place and fill ``decrypted`` with the opcode decoding.

    ``xor_table`` and ``selector_table`` are read from their first entry; pass
    a slice to start further in.  Both buffers must be writable and exactly
    :data:`ROM_SIZE` bytes long.
    """

    rom_view = _check_buffer("rom", rom)
    out_view = _check_buffer("decrypted", decrypted)
    _check_disjoint(rom_view, out_view)
    _check_tables(xor_table, selector_table)

    if trace:
        _LAST_TRACE.clear()

    rows_used: Counter[int] = Counter()
    changed_opcode = 0
    changed_data = 0
    opcode_writes = 0
    data_writes = 0

    for address in range(ROM_SIZE):
        src = rom_view[address]
        row = row_for_address(address)
        rows_used[row] += 1

        opcode_selector = selector_table[2 * row]
        opcode = permute_byte(src, PERMUTATIONS[opcode_selector]) ^ xor_table[2 * row]
        out_view[address] = opcode
        opcode_writes += 1

        data_selector = selector_table[2 * row + 1]
        data = permute_byte(src, PERMUTATIONS[data_selector]) ^ xor_table[2 * row + 1]
        rom_view[address] = data
        data_writes += 1

        if opcode != src:
            changed_opcode += 1
        if data != src:
            changed_data += 1
        if trace:
            _LAST_TRACE.append(
                DecodeTraceEntry(
                    address=address,
                    row=row,
                    source=src,
                    opcode=opcode,
                    data=data,
                    opcode_selector=opcode_selector,
                    data_selector=data_selector,
                )
            )

    logger.debug(
        "decoded 0x%04x addresses over %d rows (opcode changed=%d data changed=%d)",
        ROM_SIZE,
        len(rows_used),
        changed_opcode,
        changed_data,
    )
    return DecodeSummary(
        addresses=ROM_SIZE,
        opcode_writes=opcode_writes,
        data_writes=data_writes,
        changed_opcode_bytes=changed_opcode,
        changed_data_bytes=changed_data,
        rows_used=dict(sorted(rows_used.items())),
    )


__all__ = [
    "DecodeSummary",
    "DecodeTraceEntry",
    "KEY_TABLE_LENGTH",
    "ROM_SIZE",
    "ROW_ADDRESS_BITS",
    "ROW_COUNT",
    "decode",
    "encrypt_byte",
    "last_decode_trace",
    "row_for_address",
    "transform_byte",
]
