"""Filesystem helpers for emitting decrypted images and manifests."""

from __future__ import annotations

import json
import os
import tempfile


def _as_fs_path(path: str | os.PathLike[str]) -> str:
    return os.fspath(path)


def _ensure_directory(path: str) -> str:
    directory = os.path.dirname(path)
    if not directory:
        directory = "."
    os.makedirs(directory, exist_ok=True)
    return directory


def _atomic_write(path: str | os.PathLike[str], writer, *, mode: str, encoding: str | None) -> None:
    target = _as_fs_path(path)
    directory = _ensure_directory(target)
    fd, temp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".partial", dir=directory)
    try:
        with os.fdopen(fd, mode, encoding=encoding) as handle:
            writer(handle)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, target)
    except Exception:
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise


def write_bytes(path: str | os.PathLike[str], payload: bytes) -> None:
    """Write ``payload`` to ``path`` atomically."""

    def _writer(handle) -> None:
        handle.write(payload)

    _atomic_write(path, _writer, mode="wb", encoding=None)


def write_json(
    path: str | os.PathLike[str],
    obj,
    *,
    encoding: str = "utf-8",
    sort_keys: bool = False,
) -> None:
    """Serialise ``obj`` as pretty JSON at ``path``."""

    def _writer(handle) -> None:
        json.dump(obj, handle, ensure_ascii=False, indent=2, sort_keys=sort_keys)

    _atomic_write(path, _writer, mode="w", encoding=encoding)


__all__ = ["write_bytes", "write_json"]
