"""Data models for prompt context assembly."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class SourceKind(str, Enum):
    """Where a unit came from."""

    SOURCE = "source"  # Auto-collected from the workspace
    REFERENCE = "reference"  # Added explicitly by the user


class SourceUnit(BaseModel):
    """One file's identity and its current textual payload."""

    path: str  # absolute path, identity key
    name: str
    content: str
    kind: SourceKind
    truncated: bool = False  # content was cut down to fit the prompt budget

    @classmethod
    def from_path(cls, path: str | Path, content: str, kind: SourceKind) -> SourceUnit:
        path = Path(path)
        return cls(path=str(path), name=path.name, content=content, kind=kind)

    @property
    def label(self) -> str:
        return "Reference" if self.kind == SourceKind.REFERENCE else "Source"

    def section_header(self, index: int, truncated: bool | None = None) -> str:
        """Header line for this unit as the `index`-th file of its section."""
        if truncated is None:
            truncated = self.truncated
        suffix = " (truncated)" if truncated else ""
        return f"\n--- {self.label} File {index}: {self.name}{suffix} ---\n"


class PackResult(BaseModel):
    """Outcome of budgeted packing."""

    included: list[SourceUnit] = Field(default_factory=list)
    skipped_count: int = 0
    chars_used: int = 0
    budget: int = 0


class ContextStats(BaseModel):
    """Pre-packing totals for the current context."""

    reference_files: int = 0
    source_files: int = 0
    total_size: int = 0


class AssembledPrompt(BaseModel):
    """The final prompt plus what went into it."""

    prompt: str
    included: list[SourceUnit] = Field(default_factory=list)
    skipped_count: int = 0
    hard_truncated: bool = False  # the final safety cap cut the prompt

    def summary(self) -> str:
        """Human-readable summary of what's in the prompt."""
        sources = sum(1 for u in self.included if u.kind == SourceKind.SOURCE)
        references = len(self.included) - sources
        lines = [
            f"Prompt length: {len(self.prompt):,} chars",
            f"Included {len(self.included)} files ({sources} source, {references} reference)",
        ]
        if self.skipped_count:
            lines.append(f"Skipped {self.skipped_count} files due to length constraints")
        for unit in self.included:
            marker = " (truncated)" if unit.truncated else ""
            lines.append(f"  - [{unit.kind.value}] {unit.name}{marker}")
        if self.hard_truncated:
            lines.append("Prompt was cut by the final length cap")
        return "\n".join(lines)
