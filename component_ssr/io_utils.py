"""Utility helpers for text IO and stderr diagnostics."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO, Union

PathLike = Union[str, Path]


def read_text(path: PathLike) -> str:
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Input file not found: {file_path}")
    return file_path.read_text(encoding="utf-8")


def write_text(path: PathLike, content: str, *, encoding: str = "utf-8") -> Path:
    """Write text content to a file, creating parent directories as needed."""

    file_path = Path(path)
    if file_path.parent != Path(""):
        file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding=encoding)
    return file_path


def warn(msg: str, *, stream: TextIO | None = None) -> None:
    print(msg, file=stream or sys.stderr)


__all__ = ["read_text", "warn", "write_text"]
