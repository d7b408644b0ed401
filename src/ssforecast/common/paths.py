"""src/ssforecast/common/paths.py"""

from __future__ import annotations

from pathlib import Path


def resolve_path(root: str | Path, maybe_path: str | Path) -> Path:
    """
    Resolve a possibly relative path against a project root.

    Absolute paths are returned unchanged (but resolved).
    """
    p = Path(maybe_path)
    return p.resolve() if p.is_absolute() else (Path(root) / p).resolve()
