"""Context assembly engine.

Pipeline per prompt:
  1. Snapshot the budget limits and the current source + reference units
  2. Rank every unit by its name/path priority
  3. Pack units into the character budget left after preamble and question
  4. Lay the packed units out and apply the final hard cap

Source units are rebuilt from the workspace on `refresh()`; reference units
persist until removed. Refreshes are serialized by a lock, and the new source
list is swapped in only once it is complete.

Usage:
    engine = ContextEngine(LocalWorkspace(root), ConfigSource.from_project(root))
    await engine.refresh()
    await engine.add_reference_file("docs/design.md")
    prompt = await engine.generate_full_prompt("How does login work?")
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from promptpack.config import ConfigSource, ContextConfig
from promptpack.context.assembler import PromptAssembler
from promptpack.context.collector import FileCollector
from promptpack.context.models import AssembledPrompt, ContextStats, SourceUnit
from promptpack.context.packer import BudgetPacker
from promptpack.context.ranking import PriorityRanker
from promptpack.context.references import ReferenceStore
from promptpack.workspace import Workspace

logger = logging.getLogger("promptpack.context")

# Slack kept back from the packing budget on top of the layout frame
PROMPT_BUFFER = 100


class ContextEngine:
    """Holds the context state for one session and builds prompts from it."""

    def __init__(
        self,
        workspace: Workspace,
        config: ConfigSource | None = None,
        ranker: PriorityRanker | None = None,
        packer: BudgetPacker | None = None,
    ) -> None:
        self.workspace = workspace
        self.config = config or ConfigSource()
        self.ranker = ranker or PriorityRanker()
        self.packer = packer or BudgetPacker()
        self.collector = FileCollector(workspace)
        self.references = ReferenceStore(workspace)
        self._sources: list[SourceUnit] = []
        self._lock = asyncio.Lock()
        self._unsubscribe = self.config.subscribe(self._on_config_changed)

    # -------------------------------------------------------------------
    # Source files
    # -------------------------------------------------------------------

    async def refresh(self) -> None:
        """Rebuild the source units from the workspace."""
        async with self._lock:
            config = self.config.snapshot()
            self._sources = await self.collector.collect(
                config.extensions,
                config.exclude_patterns,
                config.max_context_files,
                config.max_file_content_length,
            )

    async def init_project_context(self) -> None:
        await self.refresh()

    def clear_project_context(self) -> None:
        self._sources = []

    async def on_file_saved(self, path: str | Path) -> bool:
        """Refresh if a tracked source file was saved. Returns True if refreshed."""
        ext = Path(path).suffix.lstrip(".").lower()
        tracked = {e.lstrip(".").lower() for e in self.config.snapshot().extensions}
        if ext not in tracked:
            return False
        await self.refresh()
        return True

    async def on_workspace_changed(self) -> None:
        await self.refresh()

    def get_source_files(self) -> list[SourceUnit]:
        return [unit.model_copy() for unit in self._sources]

    # -------------------------------------------------------------------
    # Reference files
    # -------------------------------------------------------------------

    async def add_reference_file(self, path: str | Path) -> bool:
        return await self.references.add(path)

    def remove_reference_file(self, path: str | Path) -> bool:
        return self.references.remove(path)

    def clear_reference_files(self) -> None:
        self.references.clear()

    def get_reference_files(self) -> list[SourceUnit]:
        return self.references.files()

    # -------------------------------------------------------------------
    # Prompt generation
    # -------------------------------------------------------------------

    async def generate_full_prompt(self, user_message: str) -> str:
        result = await self.assemble_prompt(user_message)
        return result.prompt

    async def assemble_prompt(self, user_message: str) -> AssembledPrompt:
        """Rank, pack and lay out the current context around `user_message`."""
        async with self._lock:
            limits = self.config.limits()
            units = self.references.files() + self.get_source_files()

        ranked = self.ranker.rank(units)
        assembler = PromptAssembler(limits.max_prompt_chars)
        packed = self.packer.pack(
            ranked,
            max_prompt_chars=limits.max_prompt_chars,
            preamble_chars=assembler.frame_length(len(ranked)) + PROMPT_BUFFER,
            user_message_chars=len(user_message),
        )

        layout = assembler.layout(packed.included, packed.skipped_count, user_message)
        prompt = assembler.enforce_cap(layout)

        return AssembledPrompt(
            prompt=prompt,
            included=packed.included,
            skipped_count=packed.skipped_count,
            hard_truncated=len(layout) > limits.max_prompt_chars,
        )

    def ranked_files(self) -> list[tuple[SourceUnit, int]]:
        """All current units in packing order, with their priority scores."""
        units = self.references.files() + self.get_source_files()
        return self.ranker.ranked_with_scores(units)

    # -------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------

    def get_context_stats(self) -> ContextStats:
        references = self.references.files()
        return ContextStats(
            reference_files=len(references),
            source_files=len(self._sources),
            total_size=sum(len(u.content) for u in references + self._sources),
        )

    def close(self) -> None:
        """Stop listening for configuration changes."""
        self._unsubscribe()

    def _on_config_changed(self, config: ContextConfig) -> None:
        logger.info(
            f"Context limits changed: max_files={config.max_context_files}, "
            f"max_prompt_length={config.max_prompt_length}, "
            f"max_file_content_length={config.max_file_content_length}"
        )
