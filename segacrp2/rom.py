"""Host-side helpers binding ROM images to the decode engine.

The engine only covers ``0x0000-0x7FFF``.  Program regions on real boards are
often larger (banked ROM, sound data); anything past the encrypted window is
copied through unchanged to both outputs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .engine import ROM_SIZE, DecodeSummary
from .exceptions import RomImageError
from .keys import KeyVariant, resolve_variant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecryptedImage:
    """Opcode and data views of one decrypted program region."""

    opcodes: bytes
    data: bytes
    variant: KeyVariant
    summary: DecodeSummary

    def __len__(self) -> int:
        return len(self.data)

    def fetch(self, address: int, *, opcode: bool) -> int:
        """Return the byte the CPU sees at ``address`` for an opcode or data fetch."""

        return fetch(self, address, opcode=opcode)


def fetch(image: DecryptedImage, address: int, *, opcode: bool) -> int:
    if not 0 <= address < len(image.data):
        raise RomImageError(f"address 0x{address:04x} outside the 0x{len(image.data):x}-byte image")
    source = image.opcodes if opcode else image.data
    return source[address]


def decrypt_image(image: bytes, variant: str | KeyVariant, *, trace: bool = False) -> DecryptedImage:
    """Decrypt the encrypted window of ``image`` with ``variant``'s key.

    ``image`` is not modified.  It must cover at least the full
    ``0x0000-0x7FFF`` window.
    """

    resolved = resolve_variant(variant)
    if len(image) < ROM_SIZE:
        raise RomImageError(
            f"image is 0x{len(image):x} bytes, the encrypted window needs 0x{ROM_SIZE:04x}"
        )

    rom = bytearray(image[:ROM_SIZE])
    decrypted = bytearray(ROM_SIZE)
    summary = resolved.decrypt(rom, decrypted, trace=trace)

    tail = bytes(image[ROM_SIZE:])
    if tail:
        logger.info("passing 0x%x bytes beyond the encrypted window through unchanged", len(tail))
    return DecryptedImage(
        opcodes=bytes(decrypted) + tail,
        data=bytes(rom) + tail,
        variant=resolved,
        summary=summary,
    )


__all__ = ["DecryptedImage", "decrypt_image", "fetch"]
