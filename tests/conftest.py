"""Test configuration ensuring the project source tree is importable."""

from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent

root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)
else:
    idx = sys.path.index(root_str)
    if idx != 0:
        sys.path.insert(0, sys.path.pop(idx))

from segacrp2.engine import ROM_SIZE  # noqa: E402


def make_rom(seed: int, size: int = ROM_SIZE) -> bytearray:
    """Return ``size`` deterministic pseudo-random bytes."""

    rng = random.Random(seed)
    return bytearray(rng.getrandbits(8) for _ in range(size))


@pytest.fixture
def random_rom() -> bytearray:
    return make_rom(0x5177)


@pytest.fixture(scope="session")
def random_rom_bytes() -> bytes:
    return bytes(make_rom(0x0005))


@pytest.fixture
def rom_file(tmp_path: Path, random_rom_bytes: bytes) -> Path:
    path = tmp_path / "epr-test.bin"
    path.write_bytes(random_rom_bytes)
    return path
