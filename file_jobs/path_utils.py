"""Destination path derivation for copy/move jobs.

Every transferred path lands at `dest_dir/<own base name>`, at every level of
a tree walk. Keep this module free of Qt dependencies.
"""

from __future__ import annotations

import os
from pathlib import Path


def base_name(path: str | Path) -> str:
    """Base name of `path`, ignoring trailing separators ("/a/dir/" -> "dir")."""
    s = os.fspath(path)
    stripped = s.rstrip("/" + os.sep)
    return os.path.basename(stripped or s)


def dest_path(src: str | Path, dest_dir: str | Path) -> str:
    """Destination for `src` when transferred into `dest_dir`."""
    return os.path.join(os.fspath(dest_dir), base_name(src))


def temp_path(dst: str | Path, suffix: str = ".part") -> str:
    """Sibling temporary path used while a file is being written."""
    return os.fspath(dst) + suffix


def abs_path_str(path: str | Path) -> str:
    """Absolute path string without resolving symlinks.

    Symlinks must stay visible to the tree walk, so unlike `Path.resolve`
    this only joins with the working directory and normalizes.
    """
    return os.path.abspath(os.path.expanduser(os.fspath(path)))
