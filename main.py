#!/usr/bin/env python3
"""Compat shim that forwards to :mod:`segacrp2.main`.

Keeps ``python main.py decrypt ...`` working from a source checkout alongside
``python -m segacrp2`` and the installed ``segacrp2`` console script.
"""

from __future__ import annotations

import sys

from segacrp2 import main as _cli


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``python main.py``."""

    return _cli.main(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":  # pragma: no cover - thin CLI shim
    raise SystemExit(main())
