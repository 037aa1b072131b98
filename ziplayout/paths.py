"""
Copyright 2025 DNAi inc.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

"""
Bookkeeping of entry paths already in an archive.

Unzip tools cannot extract an archive where ``docs`` is both a file and the
parent of ``docs/readme.txt``, or where the same name appears twice, so the
writer checks every new name against a PathSet.
"""

import posixpath

from .errors import DuplicateFilenamesError, PathConflictError


def _parents(path: str) -> list[str]:
    parts = path.split("/")[:-1]
    return ["/".join(parts[: i + 1]) for i in range(len(parts))]


class PathSet:
    """Set of file and directory paths, with conflict detection.

    Directory paths are stored without their trailing slash. Parents of every
    added path are recorded as implicit directories.
    """

    def __init__(self):
        self._files: set[str] = set()
        self._directories: set[str] = set()
        self._explicit: set[str] = set()

    def __contains__(self, path: str) -> bool:
        return path.rstrip("/") in self._files or path.rstrip("/") in self._directories

    def __len__(self) -> int:
        return len(self._explicit)

    def _check_parents(self, path: str) -> None:
        for parent in _parents(path):
            if parent in self._files:
                raise PathConflictError(
                    f"Cannot add {path!r}: {parent!r} is already a file in the archive"
                )

    def check_file_path(self, path: str) -> None:
        """Check that a file entry could be added, without recording it.

        Raises:
            DuplicateFilenamesError: If the same file was added before.
            PathConflictError: If the path, or one of its parents, is taken by
                the other kind of entry.
        """
        if path in self._files:
            raise DuplicateFilenamesError(f"Entry {path!r} already exists in the archive")
        if path in self._directories:
            raise PathConflictError(
                f"Cannot add file {path!r}: a directory of that name is already in the archive"
            )
        self._check_parents(path)

    def check_directory_path(self, path: str) -> None:
        """Check that a directory entry could be added, without recording it.

        Raises:
            DuplicateFilenamesError: If the directory entry was added before.
            PathConflictError: If a file of that name exists.
        """
        path = path.rstrip("/")
        if path in self._files:
            raise PathConflictError(
                f"Cannot add directory {path!r}: a file of that name is already in the archive"
            )
        if path + "/" in self._explicit:
            raise DuplicateFilenamesError(f"Entry {path + '/'!r} already exists in the archive")
        self._check_parents(path)

    def add_file_path(self, path: str) -> None:
        """Record a file entry. Raises as check_file_path()."""
        self.check_file_path(path)
        self._directories.update(_parents(path))
        self._files.add(path)
        self._explicit.add(path)

    def add_directory_path(self, path: str) -> None:
        """Record a directory entry, with or without its trailing slash."""
        self.check_directory_path(path)
        path = path.rstrip("/")
        self._directories.update(_parents(path))
        self._directories.add(path)
        self._explicit.add(path + "/")

    def unique_file_path(self, path: str) -> str:
        """Return ``path``, or a numbered variant of it not yet in the set.

        ``report.pdf`` becomes ``report (1).pdf``, then ``report (2).pdf``.
        """
        if path not in self:
            return path
        stem, ext = posixpath.splitext(path)
        counter = 1
        while True:
            candidate = f"{stem} ({counter}){ext}"
            if candidate not in self:
                return candidate
            counter += 1

    def unique_directory_path(self, path: str) -> str:
        path = path.rstrip("/")
        if path + "/" not in self._explicit and path not in self._files:
            return path + "/"
        counter = 1
        while True:
            candidate = f"{path} ({counter})"
            if candidate not in self:
                return candidate + "/"
            counter += 1
