"""Loading ROM chip dumps and writing decrypted artefacts."""

from __future__ import annotations

import hashlib
import logging
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence

from ..exceptions import RomImageError
from ..rom import DecryptedImage
from ..utils import write_bytes, write_json

LOGGER = logging.getLogger(__name__)

# Unprogrammed EPROM cells read back as 0xFF.
ERASED_FILL = 0xFF


@dataclass
class OutputRecord:
    """Paths written for one decrypted image."""

    opcodes: Path
    data: Path
    manifest: Path

    def as_dict(self) -> Dict[str, str]:
        return {
            "opcodes": str(self.opcodes),
            "data": str(self.data),
            "manifest": str(self.manifest),
        }


def load_rom_image(paths: Iterable[str | Path], *, size: Optional[int] = None) -> bytes:
    """Concatenate the chip dumps in ``paths`` into one program image.

    When ``size`` is given the result is padded with :data:`ERASED_FILL` up to
    ``size`` bytes; a longer result is rejected.
    """

    chunks = []
    for entry in paths:
        path = Path(entry)
        try:
            payload = path.read_bytes()
        except FileNotFoundError:
            raise RomImageError(f"ROM file not found: {path}") from None
        except OSError as exc:
            raise RomImageError(f"unable to read ROM file {path}: {exc}") from exc
        LOGGER.debug("loaded %s (0x%x bytes)", path, len(payload))
        chunks.append(payload)

    if not chunks:
        raise RomImageError("no ROM files given")

    image = b"".join(chunks)
    if size is not None:
        if len(image) > size:
            raise RomImageError(f"ROM files total 0x{len(image):x} bytes, more than 0x{size:x}")
        if len(image) < size:
            LOGGER.info("padding image from 0x%x to 0x%x bytes", len(image), size)
            image = image + bytes([ERASED_FILL]) * (size - len(image))
    return image


def _digest(payload: bytes) -> Dict[str, Any]:
    return {
        "length": len(payload),
        "sha1": hashlib.sha1(payload).hexdigest(),
        "crc32": f"{zlib.crc32(payload) & 0xFFFFFFFF:08x}",
    }


def build_manifest(result: DecryptedImage, *, inputs: Sequence[str | Path] = ()) -> Dict[str, Any]:
    """Return the JSON manifest describing ``result``."""

    variant = result.variant
    summary = result.summary
    return {
        "variant": variant.name,
        "part_number": variant.part_number,
        "device": variant.device,
        "shift": variant.shift,
        "inputs": [str(path) for path in inputs],
        "opcodes": _digest(result.opcodes),
        "data": _digest(result.data),
        "decoded_addresses": summary.addresses,
        "changed_opcode_bytes": summary.changed_opcode_bytes,
        "changed_data_bytes": summary.changed_data_bytes,
        "rows_used": {f"{row:02d}": count for row, count in summary.rows_used.items()},
    }


def write_outputs(
    result: DecryptedImage,
    out_dir: str | Path,
    *,
    stem: str,
    inputs: Sequence[str | Path] = (),
) -> OutputRecord:
    """Write the opcode image, data image and manifest under ``out_dir``."""

    directory = Path(out_dir)
    directory.mkdir(parents=True, exist_ok=True)
    record = OutputRecord(
        opcodes=directory / f"{stem}.opcodes.bin",
        data=directory / f"{stem}.data.bin",
        manifest=directory / f"{stem}.manifest.json",
    )
    write_bytes(record.opcodes, result.opcodes)
    write_bytes(record.data, result.data)
    write_json(record.manifest, build_manifest(result, inputs=inputs), sort_keys=True)
    LOGGER.info("Wrote %s and %s (%d bytes each)", record.opcodes, record.data, len(result.data))
    return record


__all__ = ["ERASED_FILL", "OutputRecord", "build_manifest", "load_rom_image", "write_outputs"]
