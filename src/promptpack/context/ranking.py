"""File importance scoring for packing order."""

from __future__ import annotations

from promptpack.context.models import SourceUnit

# Ordered rules: (score, name fragments, path fragments). First match wins.
_PRIORITY_RULES: list[tuple[int, tuple[str, ...], tuple[str, ...]]] = [
    (10, ("config", "package.json", "tsconfig", "pom.xml"), ()),
    (8, ("main", "index", "app"), ("src/main",)),
    (7, ("service", "manager", "provider", "controller"), ()),
    (3, ("test", "spec"), ("test/", "__tests__")),
]

DEFAULT_SCORE = 5


class PriorityRanker:
    """Orders units by a name/path heuristic: config > entry points > services > other > tests."""

    @staticmethod
    def score(unit: SourceUnit) -> int:
        name = unit.name.lower()
        path = unit.path.lower().replace("\\", "/")
        for score, name_parts, path_parts in _PRIORITY_RULES:
            if any(part in name for part in name_parts):
                return score
            if any(part in path for part in path_parts):
                return score
        return DEFAULT_SCORE

    def rank(self, units: list[SourceUnit]) -> list[SourceUnit]:
        """Sort descending by score; equal scores fall back to path order."""
        return sorted(units, key=lambda u: (-self.score(u), u.path))

    def ranked_with_scores(self, units: list[SourceUnit]) -> list[tuple[SourceUnit, int]]:
        return [(unit, self.score(unit)) for unit in self.rank(units)]
