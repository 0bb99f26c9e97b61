from itertools import permutations as all_orderings

import pytest

from segacrp2.exceptions import KeyTableError
from segacrp2.permutations import (
    EVEN_BITS,
    ODD_MASK,
    PERMUTATIONS,
    inverse_permutation,
    permutation,
    permutation_index,
    permute_byte,
)


def test_catalogue_covers_every_ordering_once() -> None:
    assert len(PERMUTATIONS) == 24
    assert len(set(PERMUTATIONS)) == 24
    assert set(PERMUTATIONS) == set(all_orderings((0, 2, 4, 6)))


@pytest.mark.parametrize("index", range(24))
def test_each_entry_is_a_permutation_of_even_bits(index: int) -> None:
    entry = permutation(index)
    assert len(entry) == 4
    assert sorted(entry) == [0, 2, 4, 6]


def test_catalogue_order_is_fixed() -> None:
    assert permutation(0) == (6, 4, 2, 0)
    assert permutation(1) == (4, 6, 2, 0)
    assert permutation(7) == (2, 6, 4, 0)
    assert permutation(12) == (4, 0, 6, 2)
    assert permutation(20) == (2, 4, 0, 6)
    assert permutation(23) == (0, 2, 4, 6)


@pytest.mark.parametrize("index", [-1, 24, 100])
def test_out_of_range_index_rejected(index: int) -> None:
    with pytest.raises(KeyTableError):
        permutation(index)


def test_identity_entry_leaves_bytes_alone() -> None:
    for value in range(256):
        assert permute_byte(value, (6, 4, 2, 0)) == value


def test_odd_bits_never_move() -> None:
    for perm in PERMUTATIONS:
        for value in range(256):
            assert permute_byte(value, perm) & ODD_MASK == value & ODD_MASK


def test_permute_byte_places_source_bits() -> None:
    # out6 <- bit2, out4 <- bit4, out2 <- bit0, out0 <- bit6
    perm = (2, 4, 0, 6)
    assert permute_byte(0x50, perm) == 0x11
    assert permute_byte(0x04, perm) == 0x40
    assert permute_byte(0x01, perm) == 0x04
    assert permute_byte(0xAA, perm) == 0xAA


@pytest.mark.parametrize("perm", [(6, 4, 2, 0), (0, 2, 4, 6)])
def test_self_inverse_entries_round_trip(perm) -> None:
    assert inverse_permutation(perm) == perm
    for value in range(256):
        assert permute_byte(permute_byte(value, perm), perm) == value


@pytest.mark.parametrize("perm", PERMUTATIONS)
def test_inverse_permutation_round_trips(perm) -> None:
    inverse = inverse_permutation(perm)
    assert sorted(inverse) == sorted(EVEN_BITS)
    for value in range(256):
        assert permute_byte(permute_byte(value, perm), inverse) == value


def test_non_involution_needs_its_inverse() -> None:
    perm = (4, 2, 6, 0)
    inverse = inverse_permutation(perm)
    assert inverse != perm
    value = 0x40
    once = permute_byte(value, perm)
    assert permute_byte(once, perm) != value
    assert permute_byte(once, inverse) == value


def test_permutation_index_reverse_lookup() -> None:
    for index, perm in enumerate(PERMUTATIONS):
        assert permutation_index(perm) == index
    with pytest.raises(KeyTableError):
        permutation_index((6, 6, 2, 0))
