"""Workspace access: file enumeration and reading.

The context engine only talks to the `Workspace` protocol, so an editor
integration can supply its own enumerator. `LocalWorkspace` is the filesystem
implementation used by the CLI and tests.
"""

from __future__ import annotations

import asyncio
import fnmatch
import os
from pathlib import Path
from typing import Protocol

from promptpack.exceptions import FileReadError, WorkspaceError


class Workspace(Protocol):
    """What the context engine needs from a workspace."""

    @property
    def root(self) -> Path | None: ...

    async def find_files(
        self, include_globs: list[str], exclude_patterns: list[str], max_results: int
    ) -> list[Path]: ...

    async def read_file(self, path: str | Path) -> str: ...


def extension_globs(extensions: list[str]) -> list[str]:
    """Turn bare extensions ("ts", ".py") into include globs ("**/*.ts")."""
    return [f"**/*.{ext.lstrip('.')}" for ext in extensions]


class LocalWorkspace:
    """A workspace backed by a directory on the local filesystem."""

    def __init__(self, root: str | Path | None) -> None:
        self._root = Path(root).resolve() if root is not None else None

    @property
    def root(self) -> Path | None:
        return self._root

    async def find_files(
        self, include_globs: list[str], exclude_patterns: list[str], max_results: int
    ) -> list[Path]:
        if self._root is None:
            return []
        if not self._root.is_dir():
            raise WorkspaceError(f"Workspace root is not a directory: {self._root}")
        return await asyncio.to_thread(
            _collect_files, self._root, include_globs, exclude_patterns, max_results
        )

    async def read_file(self, path: str | Path) -> str:
        return await asyncio.to_thread(read_text, path)


def read_text(path: str | Path) -> str:
    """Read a file as UTF-8, replacing undecodable bytes."""
    try:
        return Path(path).read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        raise FileReadError(str(path), e.strerror or str(e)) from e


def _collect_files(
    root: Path, include_globs: list[str], exclude_patterns: list[str], max_results: int
) -> list[Path]:
    """Walk `root` in sorted order, stopping after `max_results` matches."""
    files: list[Path] = []
    if max_results <= 0:
        return files

    all_exclude = list(exclude_patterns) + _read_gitignore(root)

    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)

        # Filter out excluded directories
        dirnames[:] = sorted(
            d
            for d in dirnames
            if not _should_exclude(os.path.join(rel_dir, d) if rel_dir != "." else d, all_exclude)
        )

        for filename in sorted(filenames):
            rel_path = os.path.join(rel_dir, filename) if rel_dir != "." else filename
            rel_posix = rel_path.replace(os.sep, "/")

            if _should_exclude(rel_posix, all_exclude):
                continue
            if not _matches_include(rel_posix, include_globs):
                continue

            files.append(Path(dirpath) / filename)
            if len(files) >= max_results:
                return files

    return files


def _matches_include(path: str, globs: list[str]) -> bool:
    for pattern in globs:
        if fnmatch.fnmatch(path, pattern):
            return True
        # "**/" also matches files at the root
        if pattern.startswith("**/") and fnmatch.fnmatch(path, pattern[3:]):
            return True
    return False


def _should_exclude(path: str, patterns: list[str]) -> bool:
    """Check if a path matches any exclusion pattern."""
    path_parts = Path(path).parts
    for pattern in patterns:
        # Check against full path
        if fnmatch.fnmatch(path, pattern):
            return True
        # Check against any path component
        for part in path_parts:
            if fnmatch.fnmatch(part, pattern):
                return True
    return False


def _read_gitignore(root: Path) -> list[str]:
    """Read .gitignore patterns from the workspace root."""
    gitignore = root / ".gitignore"
    if not gitignore.exists():
        return []

    patterns = []
    try:
        for line in gitignore.read_text().splitlines():
            line = line.strip()
            if line and not line.startswith("#") and not line.startswith("!"):
                # Normalize the pattern
                line = line.rstrip("/").lstrip("/")
                if line:
                    patterns.append(line)
    except OSError:
        pass
    return patterns
