"""ROM file loading and artefact output."""

from .loader import ERASED_FILL, OutputRecord, build_manifest, load_rom_image, write_outputs

__all__ = ["ERASED_FILL", "OutputRecord", "build_manifest", "load_rom_image", "write_outputs"]
