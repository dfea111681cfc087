"""Line-oriented input reading and crash-safe report writing."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

PathLike = str | os.PathLike[str]


def read_lines(path: PathLike, *, encoding: str = "utf-8") -> Iterator[str]:
    """Yield each line of ``path`` with trailing ``\\r``/``\\n`` removed.

    Raises ``FileNotFoundError`` eagerly, before the first line is requested.
    """
    source = Path(path)
    if not source.is_file():
        raise FileNotFoundError(f"input file does not exist: {source}")
    return _iter_lines(source, encoding)


def _iter_lines(source: Path, encoding: str) -> Iterator[str]:
    with source.open("r", encoding=encoding) as handle:
        for raw in handle:
            yield raw.rstrip("\r\n")


def atomic_write(path: PathLike, data: str, *, encoding: str = "utf-8") -> None:
    """Replace ``path`` with ``data`` so readers see the old or new file, never a mix.

    The destination directory must already exist.
    """
    target = Path(path)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding=encoding,
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
        delete=False,
    ) as staged:
        try:
            staged.write(data)
            staged.flush()
            os.fsync(staged.fileno())
        except BaseException:
            staged.close()
            os.unlink(staged.name)
            raise
    try:
        os.replace(staged.name, target)
    except OSError:
        os.unlink(staged.name)
        raise


__all__ = ["PathLike", "atomic_write", "read_lines"]
