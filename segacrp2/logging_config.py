"""Logging helpers for the CLI and per-run decode traces."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .engine import DecodeTraceEntry
from .utils import colorize_text, format_bits

__all__ = [
    "close_debug_logger",
    "configure_debug_file_logger",
    "configure_logging",
    "write_trace",
]

TRACE_LOGGER_NAME = "segacrp2.trace"


class _ColourFormatter(logging.Formatter):
    COLOURS = {
        logging.DEBUG: "blue",
        logging.INFO: "green",
        logging.WARNING: "yellow",
        logging.ERROR: "red",
        logging.CRITICAL: "magenta",
    }

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - trivial wrapper
        message = super().format(record)
        colour = self.COLOURS.get(record.levelno, "green")
        return colorize_text(message, colour)


def configure_logging(verbose: bool, log_file: Path | None = None) -> None:
    """Configure root logging handlers."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    level = logging.DEBUG if verbose else logging.INFO
    root.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    stream = logging.StreamHandler()
    if verbose:
        stream.setFormatter(_ColourFormatter("%(levelname)s: %(message)s"))
    else:
        stream.setLevel(logging.WARNING)
        stream.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root.addHandler(stream)


def configure_debug_file_logger(
    name: str,
    path: Path,
    *,
    level: int = logging.DEBUG,
    formatter: logging.Formatter | None = None,
) -> logging.Logger:
    """Return a logger writing debug traces to ``path``.

    Any previously configured trace handlers on ``name`` are removed so repeated
    invocations replace earlier traces instead of appending to them.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    close_debug_logger(logger)

    handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    handler._decode_trace = True  # type: ignore[attr-defined]
    if formatter is None:
        formatter = logging.Formatter("%(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


def close_debug_logger(logger: logging.Logger) -> None:
    """Tear down handlers installed by :func:`configure_debug_file_logger`."""

    for handler in list(logger.handlers):
        if getattr(handler, "_decode_trace", False):
            logger.removeHandler(handler)
            handler.close()


def write_trace(entries: Iterable[DecodeTraceEntry], path: Path) -> int:
    """Dump ``entries`` one address per line to ``path``; return the line count."""

    logger = configure_debug_file_logger(TRACE_LOGGER_NAME, path)
    count = 0
    try:
        for entry in entries:
            logger.debug(
                "0x%04x row=%02d src=%02x %s opcode=%02x data=%02x sel=%02d/%02d",
                entry.address,
                entry.row,
                entry.source,
                format_bits(entry.source),
                entry.opcode,
                entry.data,
                entry.opcode_selector,
                entry.data_selector,
            )
            count += 1
    finally:
        close_debug_logger(logger)
    return count
