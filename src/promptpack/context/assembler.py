"""Final prompt layout."""

from __future__ import annotations

import logging

from promptpack.context.models import SourceKind, SourceUnit

logger = logging.getLogger("promptpack.context")

SYSTEM_PREAMBLE = (
    "You are an AI assistant that helps developers understand and work with code.\n"
    "You will be provided with reference files of a project.\n\n"
)
SOURCES_TITLE = "=== Project Source Files ===\n"
REFERENCES_TITLE = "\n=== Reference Files (Manually Added) ===\n"
SUMMARY_TITLE = "\n--- Context Summary ---\n"
QUESTION_TITLE = "\n=== User Question ===\n"
PROMPT_TRUNCATION_MARKER = "\n\n... (prompt truncated due to length)"
# Space given back by the final cap, enough for the marker
HARD_CAP_RESERVE = 100


class PromptAssembler:
    """Lays packed units out under fixed section markers.

    The result never exceeds `max_prompt_chars`: if the layout overshoots, the
    whole string is cut and a truncation marker appended.
    """

    def __init__(self, max_prompt_chars: int) -> None:
        self.max_prompt_chars = max_prompt_chars

    def assemble(self, included: list[SourceUnit], skipped_count: int, user_message: str) -> str:
        return self.enforce_cap(self.layout(included, skipped_count, user_message))

    def frame_length(self, unit_count: int) -> int:
        """Upper bound on layout text outside the file sections and the question.

        Covers the preamble, every section title and the context summary as
        it would read for `unit_count` candidate files.
        """
        summary = self._summary(unit_count, unit_count, unit_count, unit_count)
        return (
            len(SYSTEM_PREAMBLE)
            + len(SOURCES_TITLE)
            + len(REFERENCES_TITLE)
            + len(summary)
            + len(QUESTION_TITLE)
        )

    def layout(self, included: list[SourceUnit], skipped_count: int, user_message: str) -> str:
        """The uncapped prompt text."""
        sources = [u for u in included if u.kind == SourceKind.SOURCE]
        references = [u for u in included if u.kind == SourceKind.REFERENCE]

        parts = [SYSTEM_PREAMBLE]

        if sources:
            parts.append(SOURCES_TITLE)
            parts.extend(self._render_units(sources))

        if references:
            parts.append(REFERENCES_TITLE)
            parts.extend(self._render_units(references))

        if skipped_count > 0:
            parts.append(
                self._summary(len(included), len(sources), len(references), skipped_count)
            )

        parts.append(QUESTION_TITLE)
        parts.append(user_message)

        return "".join(parts)

    def enforce_cap(self, prompt: str) -> str:
        if len(prompt) <= self.max_prompt_chars:
            return prompt

        logger.warning(
            f"Generated prompt length ({len(prompt)}) exceeds max length "
            f"({self.max_prompt_chars}), truncating..."
        )
        cut = max(self.max_prompt_chars - HARD_CAP_RESERVE, 0)
        return (prompt[:cut] + PROMPT_TRUNCATION_MARKER)[: self.max_prompt_chars]

    @staticmethod
    def _summary(included: int, sources: int, references: int, skipped: int) -> str:
        return (
            SUMMARY_TITLE
            + f"Included {included} files ({sources} source, {references} reference)\n"
            + f"Skipped {skipped} files due to length constraints\n"
        )

    @staticmethod
    def _render_units(units: list[SourceUnit]) -> list[str]:
        rendered = []
        for i, unit in enumerate(units, 1):
            rendered.append(unit.section_header(i))
            rendered.append(unit.content + "\n")
        return rendered
