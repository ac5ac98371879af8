"""Workspace file collection for the source half of the context."""

from __future__ import annotations

import logging

from promptpack.context.models import SourceKind, SourceUnit
from promptpack.exceptions import WorkspaceError
from promptpack.summarize import summarize_file, truncate_content
from promptpack.workspace import Workspace, extension_globs

logger = logging.getLogger("promptpack.context")


class FileCollector:
    """Enumerates workspace files and turns each into a summarized SourceUnit."""

    def __init__(self, workspace: Workspace) -> None:
        self.workspace = workspace

    async def collect(
        self,
        extensions: list[str],
        exclude_patterns: list[str],
        max_files: int,
        max_file_chars: int,
    ) -> list[SourceUnit]:
        """Collect up to `max_files` source units, in enumeration order.

        A file that cannot be read or processed is logged and skipped.
        """
        if self.workspace.root is None:
            return []

        try:
            paths = await self.workspace.find_files(
                extension_globs(extensions), exclude_patterns, max_files
            )
        except WorkspaceError as e:
            logger.error(f"Error initializing project context: {e}")
            return []

        units: list[SourceUnit] = []
        for path in paths[:max_files]:
            try:
                content = await self.workspace.read_file(path)
                content = summarize_file(str(path), content, max_file_chars)
                # Summarizers may return more than asked for; cap again
                content = truncate_content(content, max_file_chars)
                units.append(SourceUnit.from_path(path, content, SourceKind.SOURCE))
            except Exception as e:
                logger.error(f"Error processing file {path}: {e}")
                continue

        logger.info(f"Collected {len(units)} source files from {self.workspace.root}")
        return units
