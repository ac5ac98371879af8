"""Greedy budgeted packing of ranked units."""

from __future__ import annotations

import logging

from promptpack.context.models import PackResult, SourceKind, SourceUnit
from promptpack.summarize import truncate_content

logger = logging.getLogger("promptpack.context")

# Only cut a file down if at least this much budget is left for it
MIN_TRUNCATION_SPACE = 500
# Headroom kept back from the leftover when cutting a file down
TRUNCATION_RESERVE = 200


def section_length(unit: SourceUnit, index: int = 1, truncated: bool = False) -> int:
    """Characters a unit costs in the prompt: header, content, separators."""
    return len(unit.section_header(index, truncated)) + len(unit.content) + 1


class BudgetPacker:
    """Fills the prompt budget in priority order.

    Files that fit are taken whole. The first file that does not fit is cut
    down to the leftover space (if enough is left) and packing stops there;
    later files are never considered, even small ones.
    """

    def pack(
        self,
        units: list[SourceUnit],
        max_prompt_chars: int,
        preamble_chars: int,
        user_message_chars: int,
    ) -> PackResult:
        budget = max_prompt_chars - preamble_chars - user_message_chars
        remaining = budget
        included: list[SourceUnit] = []
        # Files are numbered per section in the layout
        counts: dict[SourceKind, int] = {}

        for unit in units:
            index = counts.get(unit.kind, 0) + 1
            cost = section_length(unit, index)
            if cost <= remaining:
                included.append(unit)
                counts[unit.kind] = index
                remaining -= cost
                continue

            if remaining > MIN_TRUNCATION_SPACE:
                overhead = len(unit.section_header(index, truncated=True)) + 1
                limit = remaining - max(TRUNCATION_RESERVE, overhead)
                content = truncate_content(unit.content, limit)
                included.append(unit.model_copy(update={"content": content, "truncated": True}))
                logger.debug(f"Truncated {unit.name} to {len(content)} chars to fit the budget")
                remaining = 0
            break

        skipped = len(units) - len(included)
        if skipped:
            logger.info(f"Packed {len(included)} files, skipped {skipped} due to length constraints")

        return PackResult(
            included=included,
            skipped_count=skipped,
            chars_used=max(budget - remaining, 0),
            budget=budget,
        )
