"""Read-only view over the application source directory handed to detectors."""
from __future__ import annotations

import os
import glob
from typing import List


class LocalSourceRepo:
    """Source repository rooted at a local directory.

    Paths passed to the helpers are relative to the root and may be given as
    several segments, e.g. ``repo.file_exists("src", "app.csproj")``.
    """

    def __init__(self, root_path: str):
        self.root_path = os.path.abspath(root_path)

    def _path(self, *paths: str) -> str:
        return os.path.join(self.root_path, *paths)

    def file_exists(self, *paths: str) -> bool:
        """Return True when the relative path is an existing file."""
        return os.path.isfile(self._path(*paths))

    def dir_exists(self, *paths: str) -> bool:
        """Return True when the relative path is an existing directory."""
        return os.path.isdir(self._path(*paths))

    def read_file(self, *paths: str) -> str:
        """Return the UTF-8 text of a file under the root."""
        with open(self._path(*paths), "r", encoding="utf-8") as fh:
            return fh.read()

    def enumerate_files(self, pattern: str, recursive: bool = False) -> List[str]:
        """List files matching a glob pattern, relative to the root, sorted."""
        search = os.path.join("**", pattern) if recursive else pattern
        matches = glob.glob(os.path.join(glob.escape(self.root_path), search), recursive=recursive)
        return sorted(
            os.path.relpath(m, self.root_path) for m in matches if os.path.isfile(m)
        )

    def __repr__(self) -> str:
        return f"LocalSourceRepo({self.root_path!r})"
