"""Locate Bruno request files in a collection directory."""

from pathlib import Path

BRU_PATTERN = "*.bru"


def find_bru_files(in_dir: Path) -> list[Path]:
    """Return every `.bru` file below `in_dir`, sorted for a stable run order.

    A path that is not a directory matches nothing. Raises OSError when the
    directory cannot be listed.
    """
    if not in_dir.is_dir():
        return []
    return sorted(p for p in in_dir.rglob(BRU_PATTERN) if p.is_file())
