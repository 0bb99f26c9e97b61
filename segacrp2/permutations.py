"""Catalogue of the 24 data-bit permutations used by the encrypted CPUs.

The encryption only ever touches D0, D2, D4 and D6.  Each catalogue entry lists,
for output bits 6, 4, 2 and 0 (in that order), which source bit lands there.
The order of the table is fixed by the hardware key tables, which store plain
indices into it, so it must never be re-sorted.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from .exceptions import KeyTableError

Permutation = Tuple[int, int, int, int]

EVEN_BITS: Permutation = (6, 4, 2, 0)
ODD_MASK = 0xAA

PERMUTATIONS: Tuple[Permutation, ...] = (
    (6, 4, 2, 0), (4, 6, 2, 0), (2, 4, 6, 0), (0, 4, 2, 6),
    (6, 2, 4, 0), (6, 0, 2, 4), (6, 4, 0, 2), (2, 6, 4, 0),
    (4, 2, 6, 0), (4, 6, 0, 2), (6, 0, 4, 2), (0, 6, 4, 2),
    (4, 0, 6, 2), (0, 4, 6, 2), (6, 2, 0, 4), (2, 6, 0, 4),
    (0, 6, 2, 4), (2, 0, 6, 4), (0, 2, 6, 4), (4, 2, 0, 6),
    (2, 4, 0, 6), (4, 0, 2, 6), (2, 0, 4, 6), (0, 2, 4, 6),
)

PERMUTATION_COUNT = len(PERMUTATIONS)

_INDEX_BY_PERMUTATION = {perm: index for index, perm in enumerate(PERMUTATIONS)}


def permutation(index: int) -> Permutation:
    """Return the catalogue entry at ``index`` (0..23)."""

    if not 0 <= index < PERMUTATION_COUNT:
        raise KeyTableError(f"permutation index out of range: {index!r}")
    return PERMUTATIONS[index]


def permutation_index(perm: Sequence[int]) -> int:
    """Return the catalogue position of ``perm``."""

    try:
        return _INDEX_BY_PERMUTATION[tuple(perm)]
    except KeyError:
        raise KeyTableError(f"not a permutation of the even data bits: {tuple(perm)!r}") from None


def permute_byte(value: int, perm: Sequence[int]) -> int:
    """Reorder the even bits of ``value`` according to ``perm``.

    Bits 7, 5, 3 and 1 pass through unchanged.
    """

    out = value & ODD_MASK
    for target, source in zip(EVEN_BITS, perm):
        out |= ((value >> source) & 1) << target
    return out


def inverse_permutation(perm: Sequence[int]) -> Permutation:
    """Return the permutation that undoes ``perm``.

    Output bit ``EVEN_BITS[i]`` receives source bit ``perm[i]``, so the inverse
    sends bit ``EVEN_BITS[i]`` back to position ``perm[i]``.
    """

    if sorted(perm) != sorted(EVEN_BITS):
        raise KeyTableError(f"not a permutation of the even data bits: {tuple(perm)!r}")
    inverse = [0, 0, 0, 0]
    for target, source in zip(EVEN_BITS, perm):
        inverse[EVEN_BITS.index(source)] = target
    return (inverse[0], inverse[1], inverse[2], inverse[3])


__all__ = [
    "EVEN_BITS",
    "ODD_MASK",
    "PERMUTATIONS",
    "PERMUTATION_COUNT",
    "Permutation",
    "inverse_permutation",
    "permutation",
    "permutation_index",
    "permute_byte",
]
