"""User-curated reference files."""

from __future__ import annotations

import logging
from pathlib import Path

from promptpack.context.models import SourceKind, SourceUnit
from promptpack.exceptions import FileReadError
from promptpack.workspace import Workspace

logger = logging.getLogger("promptpack.context")


class ReferenceStore:
    """Path-keyed, insertion-ordered set of reference files.

    Content is kept verbatim; only the packer cuts it down. Adding a path that
    is already present replaces the entry in place.
    """

    def __init__(self, workspace: Workspace) -> None:
        self.workspace = workspace
        self._units: dict[str, SourceUnit] = {}

    @staticmethod
    def _key(path: str | Path) -> str:
        return str(Path(path).resolve())

    async def add(self, path: str | Path) -> bool:
        """Read `path` and insert or replace its unit. False if unreadable."""
        key = self._key(path)
        try:
            content = await self.workspace.read_file(key)
        except (FileReadError, OSError) as e:
            logger.error(f"Error adding reference file: {e}")
            return False

        self._units[key] = SourceUnit.from_path(key, content, SourceKind.REFERENCE)
        return True

    def remove(self, path: str | Path) -> bool:
        key = self._key(path)
        if key not in self._units:
            return False
        del self._units[key]
        return True

    def clear(self) -> None:
        self._units.clear()

    def files(self) -> list[SourceUnit]:
        """Copies of the stored units, in insertion order."""
        return [unit.model_copy() for unit in self._units.values()]

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return self._key(path) in self._units
