"""Repository root discovery by directory ascent."""

import os
from pathlib import Path
from typing import Union

from ..core.constants import REFS_MARKER
from ..exceptions import NotFoundError


def has_marker(path: Path, marker: str = REFS_MARKER, directory: bool = True) -> bool:
    """Check whether ``path`` contains ``marker``."""
    candidate = path / marker
    return candidate.is_dir() if directory else candidate.exists()


def find_root(
    start_path: Union[str, os.PathLike],
    marker: str = REFS_MARKER,
    directory: bool = True,
) -> Path:
    """Return the closest ancestor of ``start_path`` (inclusive) holding ``marker``.

    Ascends at most once per path component. The filesystem root is never
    treated as a repository root.
    """
    current = Path(os.path.abspath(os.fspath(start_path)))

    for _ in range(len(current.parts)):
        if current == current.parent:
            break
        if has_marker(current, marker, directory):
            return current
        current = current.parent

    raise NotFoundError(
        f"{marker} directory not found",
        details={"start_path": os.fspath(start_path), "marker": marker},
    )
