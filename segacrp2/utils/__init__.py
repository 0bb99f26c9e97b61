"""Utility helpers shared by the CLI and the artefact writers."""

from __future__ import annotations

from .io_utils import write_bytes, write_json

# Terminal helpers used by the verbose log stream

_COLOR_CODES = {
    "red": "31",
    "green": "32",
    "yellow": "33",
    "blue": "34",
    "magenta": "35",
    "cyan": "36",
}


def colorize_text(text: str, color: str, bold: bool = False) -> str:
    """Return *text* wrapped in ANSI color codes."""
    code = _COLOR_CODES.get(color, "0")
    style = "1;" if bold else ""
    return f"\033[{style}{code}m{text}\033[0m"


def format_bits(value: int) -> str:
    """Return ``value`` as eight bits with the even (encrypted) positions bracketed."""

    digits = []
    for bit in range(7, -1, -1):
        digit = str((value >> bit) & 1)
        digits.append(f"[{digit}]" if bit % 2 == 0 else digit)
    return "".join(digits)


__all__ = ["colorize_text", "format_bits", "write_bytes", "write_json"]
