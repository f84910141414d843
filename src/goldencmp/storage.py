"""Whole-file read/write of golden reference files."""

from __future__ import annotations

import os
from pathlib import Path

from goldencmp.errors import GoldenError, GoldenErrorCode

DEFAULT_WRITE_MODE = 0o777


def read_golden_bytes(path: Path) -> bytes:
    """Read a golden file fully.

    Args:
        path: Golden file path.

    Returns:
        Raw file bytes.

    Raises:
        GoldenError: If the file is missing or unreadable.
    """
    try:
        return path.read_bytes()
    except OSError as exc:
        raise GoldenError(
            GoldenErrorCode.READ_FAILED,
            f"read file: {exc}",
            data={"path": str(path)},
        ) from exc


def write_golden_bytes(path: Path, data: bytes, mode: int = DEFAULT_WRITE_MODE) -> None:
    """Overwrite a golden file with data, creating it when missing.

    Permission bits only apply when the file is created (umask still applies).
    There is no temp-file rename: a failed write may leave a truncated file.

    Args:
        path: Golden file path.
        data: Serialized payload.
        mode: Permission bits for a newly created file; 0 means unset and
            falls back to ``DEFAULT_WRITE_MODE``.

    Raises:
        GoldenError: If the parent directory or file cannot be written.
    """
    mode = mode or DEFAULT_WRITE_MODE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
    except OSError as exc:
        raise GoldenError(
            GoldenErrorCode.WRITE_FAILED,
            f"write file: {exc}",
            data={"path": str(path), "mode": oct(mode)},
        ) from exc
