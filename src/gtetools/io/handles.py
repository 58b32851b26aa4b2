"""Text handle resolution and sequence name rewriting shared by the readers
and writers."""

from __future__ import annotations

from pathlib import Path
from typing import IO, Union

Source = Union[Path, str, IO[str]]


def open_text(source: Source, mode: str = "r") -> tuple[IO[str], bool, str]:
    """Open a path, or pass an already open text handle through.

    Args:
        source: File path or open text handle.
        mode: Open mode for paths ("r" or "w").

    Returns:
        Tuple of (handle, whether the caller owns and must close it, name
        used in error messages).

    Raises:
        FileNotFoundError: If a path opened for reading does not exist.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        if "r" in mode and not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return open(path, mode), True, str(path)
    return source, False, getattr(source, "name", "<stream>")


def update_seq_name(seq_name: str, prefix: str | None = None, lstrip: str | None = None) -> str:
    """Strip a leading string from a sequence name, then add a prefix.

    Example:
        >>> update_seq_name("chr1", prefix="Chr", lstrip="chr")
        'Chr1'
    """
    if lstrip and seq_name.startswith(lstrip):
        seq_name = seq_name[len(lstrip):]
    if prefix:
        seq_name = prefix + seq_name
    return seq_name
