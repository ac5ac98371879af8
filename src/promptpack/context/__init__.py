"""Budgeted prompt context assembly.

Collects source files from a workspace, keeps user-chosen reference files,
ranks everything by importance and packs it into a character budget.

Usage:
    from promptpack.context import ContextEngine
    from promptpack.workspace import LocalWorkspace

    engine = ContextEngine(LocalWorkspace(root))
    await engine.refresh()
    prompt = await engine.generate_full_prompt("explain the login flow")
"""

from promptpack.context.engine import ContextEngine
from promptpack.context.models import (
    AssembledPrompt,
    ContextStats,
    PackResult,
    SourceKind,
    SourceUnit,
)

__all__ = [
    "AssembledPrompt",
    "ContextEngine",
    "ContextStats",
    "PackResult",
    "SourceKind",
    "SourceUnit",
]
