"""Structured decryption report helpers."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional


@dataclass
class DecryptReport:
    """Summarises a single decryption run for maintainers."""

    variant: str
    part_number: str
    shift: Optional[int] = None
    inputs: List[str] = field(default_factory=list)
    image_length: int = 0
    decoded_length: int = 0
    changed_opcode_bytes: int = 0
    changed_data_bytes: int = 0
    rows_used: Dict[int, int] = field(default_factory=dict)
    outputs: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def to_text(self) -> str:
        """Format the report as a human-readable summary."""

        lines: List[str] = []
        lines.append(f"Key variant: {self.variant} ({self.part_number})")
        if self.shift is not None:
            lines.append(f"Master table shift: {self.shift}")
        if self.inputs:
            lines.append("Inputs:")
            lines.extend(f"  - {path}" for path in self.inputs)
        lines.append(
            f"Decoded 0x{self.decoded_length:04x} of 0x{self.image_length:04x} bytes"
        )
        lines.append(f"Opcode bytes changed: {self.changed_opcode_bytes}")
        lines.append(f"Data bytes changed: {self.changed_data_bytes}")
        lines.append(f"Rows used: {len(self.rows_used)}")
        if self.outputs:
            lines.append("Outputs:")
            for kind, path in sorted(self.outputs.items()):
                lines.append(f"  {kind}: {path}")
        if self.warnings:
            lines.append("Warnings:")
            lines.extend(f"  - {warning}" for warning in self.warnings)
        return "\n".join(lines)

    def to_json(self) -> Dict[str, object]:
        """Return a JSON-serialisable representation."""

        data = asdict(self)
        data["rows_used"] = {f"{row:02d}": count for row, count in sorted(self.rows_used.items())}
        return data
