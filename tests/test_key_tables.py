import pytest

from segacrp2.engine import ROM_SIZE, decode
from segacrp2.exceptions import KeyTableError
from segacrp2.keys import KeyTable, MasterKeyTable, data


def test_key_table_validates_lengths() -> None:
    with pytest.raises(KeyTableError, match="xor table needs 128"):
        KeyTable(xor_values=(0,) * 127, selector_indices=(0,) * 128)
    with pytest.raises(KeyTableError, match="selector table needs 128"):
        KeyTable(xor_values=(0,) * 128, selector_indices=(0,) * 131)


@pytest.mark.parametrize("bad", [-1, 24, 255])
def test_key_table_rejects_out_of_range_selector(bad: int) -> None:
    selectors = [0] * 128
    selectors[5] = bad
    with pytest.raises(KeyTableError, match="selector entry 5"):
        KeyTable(xor_values=(0,) * 128, selector_indices=selectors, label="broken")


@pytest.mark.parametrize("bad", [-1, 0x100])
def test_key_table_rejects_non_byte_xor(bad: int) -> None:
    values = [0] * 128
    values[64] = bad
    with pytest.raises(KeyTableError, match="xor entry 64"):
        KeyTable(xor_values=values, selector_indices=(0,) * 128)


def test_key_table_freezes_sequences() -> None:
    values = list(data.XOR_315_5176)
    table = KeyTable(xor_values=values, selector_indices=list(data.SELECTORS_315_5176))
    values[0] = 0xFF
    assert table.xor_values[0] == data.XOR_315_5176[0]
    assert isinstance(table.selector_indices, tuple)


def test_row_entry_picks_even_and_odd_slots() -> None:
    table = KeyTable(xor_values=data.XOR_315_5178, selector_indices=data.SELECTORS_315_5178)
    assert table.row_entry(0, opcode=True) == (2, 0x00)
    assert table.row_entry(0, opcode=False) == (3, 0x55)
    assert table.row_entry(63, opcode=True) == (8, 0x01)
    assert table.row_entry(63, opcode=False) == (10, 0x14)
    with pytest.raises(KeyTableError):
        table.row_entry(64, opcode=True)


def test_rows_lists_all_sixty_four_rows() -> None:
    table = KeyTable(xor_values=data.XOR_315_5162, selector_indices=data.SELECTORS_315_5162)
    rows = list(table.rows())
    assert [row.row for row in rows] == list(range(64))
    assert rows[0].opcode_selector == 4
    assert rows[0].opcode_permutation == (6, 2, 4, 0)
    assert rows[0].data_xor == 0x10


def test_from_master_builds_windows() -> None:
    for shift in range(4):
        table = KeyTable.from_master(data.XOR_317_MASTER, data.SELECTORS_317_MASTER, shift)
        assert table.shift == shift
        assert table.xor_values == data.XOR_317_MASTER[shift : shift + 128]
        assert table.selector_indices == data.SELECTORS_317_MASTER[shift : shift + 128]


@pytest.mark.parametrize("shift", [-1, 4, 10])
def test_from_master_rejects_window_past_end(shift: int) -> None:
    with pytest.raises(KeyTableError, match="runs past"):
        KeyTable.from_master(data.XOR_317_MASTER, data.SELECTORS_317_MASTER, shift)


def test_from_master_rejects_mismatched_masters() -> None:
    with pytest.raises(KeyTableError, match="differ in length"):
        KeyTable.from_master(data.XOR_317_MASTER, data.SELECTORS_317_MASTER[:130], 0)


def test_master_key_table_window() -> None:
    master = MasterKeyTable(data.XOR_317_MASTER, data.SELECTORS_317_MASTER, label="317")
    assert master.max_shift == 3
    window = master.window(3)
    assert window.label == "317+3"
    assert window.xor_values[-1] == data.XOR_317_MASTER[-1]
    with pytest.raises(KeyTableError):
        master.window(4)


def test_master_key_table_requires_full_window() -> None:
    with pytest.raises(KeyTableError, match="shorter than 128"):
        MasterKeyTable((0,) * 100, (0,) * 100)


def test_key_table_decode_matches_engine(random_rom: bytearray) -> None:
    table = KeyTable(xor_values=data.XOR_315_5179, selector_indices=data.SELECTORS_315_5179)
    via_table_rom = bytearray(random_rom)
    via_table_out = bytearray(ROM_SIZE)
    table.decode(via_table_rom, via_table_out)

    direct_out = bytearray(ROM_SIZE)
    decode(random_rom, direct_out, data.XOR_315_5179, data.SELECTORS_315_5179)
    assert via_table_out == direct_out
    assert via_table_rom == random_rom
