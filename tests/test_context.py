"""Tests for source collection, reference files and the context engine."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pytest

from promptpack.config import ConfigSource, ContextConfig
from promptpack.context import ContextEngine, SourceKind
from promptpack.context.collector import FileCollector
from promptpack.context.references import ReferenceStore
from promptpack.exceptions import FileReadError, WorkspaceError
from promptpack.workspace import LocalWorkspace


class FakeWorkspace:
    """In-memory workspace; paths listed in `unreadable` fail to read."""

    def __init__(self, files: dict[str, str], unreadable=(), root: Path | None = Path("/fake")):
        self.files = files
        self.unreadable = set(unreadable)
        self._root = root
        self.fail_enumeration = False

    @property
    def root(self) -> Path | None:
        return self._root

    async def find_files(self, include_globs, exclude_patterns, max_results):
        if self.fail_enumeration:
            raise WorkspaceError("enumeration failed")
        return [Path(p) for p in sorted(self.files)][:max_results]

    async def read_file(self, path):
        path = str(path)
        if path in self.unreadable or path not in self.files:
            raise FileReadError(path, "permission denied")
        return self.files[path]


def _engine(root: Path, **limits) -> ContextEngine:
    return ContextEngine(LocalWorkspace(root), ConfigSource(ContextConfig(**limits)))


class TestFileCollector:
    def test_collect(self, tmp_project: Path):
        collector = FileCollector(LocalWorkspace(tmp_project))
        config = ContextConfig()
        units = asyncio.run(
            collector.collect(config.extensions, config.exclude_patterns, 50, 3000)
        )
        names = [u.name for u in units]
        assert names == [
            "index.test.ts",
            "OrderService.java",
            "helpers.js",
            "index.ts",
            "user.service.ts",
        ]
        assert all(u.kind == SourceKind.SOURCE for u in units)

        by_name = {u.name: u for u in units}
        assert "Class: OrderService extends BaseService" in by_name["OrderService.java"].content
        assert "Class: UserService extends BaseService" in by_name["user.service.ts"].content
        assert "Function: join(a, b)" in by_name["helpers.js"].content

    def test_max_files_and_length(self, tmp_project: Path):
        collector = FileCollector(LocalWorkspace(tmp_project))
        config = ContextConfig()
        units = asyncio.run(collector.collect(config.extensions, config.exclude_patterns, 2, 60))
        assert len(units) == 2
        assert all(len(u.content) <= 60 for u in units)

    def test_unreadable_file_skipped(self, caplog):
        workspace = FakeWorkspace(
            {"/fake/a.ts": "let a = 1;\n", "/fake/b.ts": "let b = 2;\n"},
            unreadable=["/fake/a.ts"],
        )
        with caplog.at_level(logging.ERROR, logger="promptpack.context"):
            units = asyncio.run(FileCollector(workspace).collect(["ts"], [], 50, 3000))
        assert [u.name for u in units] == ["b.ts"]
        assert "Error processing file" in caplog.text

    def test_no_root(self):
        workspace = FakeWorkspace({"/fake/a.ts": "x"}, root=None)
        assert asyncio.run(FileCollector(workspace).collect(["ts"], [], 50, 3000)) == []

    def test_enumeration_failure(self):
        workspace = FakeWorkspace({"/fake/a.ts": "x"})
        workspace.fail_enumeration = True
        assert asyncio.run(FileCollector(workspace).collect(["ts"], [], 50, 3000)) == []


class TestReferenceStore:
    def test_add_and_list(self, tmp_path: Path):
        doc = tmp_path / "design.md"
        doc.write_text("# Design\n")
        store = ReferenceStore(LocalWorkspace(tmp_path))

        assert asyncio.run(store.add(doc)) is True
        files = store.files()
        assert len(files) == 1
        assert files[0].name == "design.md"
        assert files[0].kind == SourceKind.REFERENCE
        assert files[0].content == "# Design\n"
        assert doc in store

    def test_content_kept_verbatim(self, tmp_path: Path):
        doc = tmp_path / "Big.java"
        doc.write_text("public class Big {}\n" * 1000)
        store = ReferenceStore(LocalWorkspace(tmp_path))
        asyncio.run(store.add(doc))
        assert store.files()[0].content == doc.read_text()

    def test_re_add_replaces(self, tmp_path: Path):
        doc = tmp_path / "a.md"
        doc.write_text("first")
        other = tmp_path / "b.md"
        other.write_text("other")
        store = ReferenceStore(LocalWorkspace(tmp_path))

        asyncio.run(store.add(doc))
        asyncio.run(store.add(other))
        doc.write_text("second")
        asyncio.run(store.add(doc))

        files = store.files()
        assert len(files) == 2
        assert [f.name for f in files] == ["a.md", "b.md"]
        assert files[0].content == "second"

    def test_same_file_different_spelling(self, tmp_path: Path):
        doc = tmp_path / "a.md"
        doc.write_text("x")
        store = ReferenceStore(LocalWorkspace(tmp_path))
        asyncio.run(store.add(doc))
        asyncio.run(store.add(tmp_path / "." / "a.md"))
        assert len(store) == 1

    def test_add_unreadable(self, tmp_path: Path, caplog):
        store = ReferenceStore(LocalWorkspace(tmp_path))
        with caplog.at_level(logging.ERROR, logger="promptpack.context"):
            assert asyncio.run(store.add(tmp_path / "missing.md")) is False
        assert len(store) == 0
        assert "Error adding reference file" in caplog.text

    def test_remove(self, tmp_path: Path):
        doc = tmp_path / "a.md"
        doc.write_text("x")
        store = ReferenceStore(LocalWorkspace(tmp_path))
        asyncio.run(store.add(doc))

        assert store.remove(tmp_path / "never-added.md") is False
        assert len(store) == 1
        assert store.remove(doc) is True
        assert len(store) == 0

    def test_clear(self, tmp_path: Path):
        store = ReferenceStore(LocalWorkspace(tmp_path))
        for name in ("a.md", "b.md"):
            (tmp_path / name).write_text(name)
            asyncio.run(store.add(tmp_path / name))
        assert len(store) == 2
        store.clear()
        assert store.files() == []

    def test_files_are_copies(self, tmp_path: Path):
        doc = tmp_path / "a.md"
        doc.write_text("x")
        store = ReferenceStore(LocalWorkspace(tmp_path))
        asyncio.run(store.add(doc))
        store.files()[0].content = "changed"
        assert store.files()[0].content == "x"


class TestContextEngine:
    def test_refresh_and_sources(self, tmp_project: Path):
        engine = _engine(tmp_project)
        asyncio.run(engine.init_project_context())
        assert len(engine.get_source_files()) == 5

        engine.clear_project_context()
        assert engine.get_source_files() == []

    def test_prompt_contains_message(self, tmp_project: Path):
        engine = _engine(tmp_project)
        asyncio.run(engine.refresh())
        message = "How does UserService find users?"
        prompt = asyncio.run(engine.generate_full_prompt(message))

        assert prompt.endswith(message)
        assert "=== Project Source Files ===" in prompt
        assert "user.service.ts" in prompt
        assert len(prompt) <= 50000

    def test_empty_context(self):
        engine = ContextEngine(LocalWorkspace(None))
        asyncio.run(engine.refresh())
        result = asyncio.run(engine.assemble_prompt("hi"))
        assert result.included == []
        assert result.prompt.endswith("=== User Question ===\nhi")

    def test_hard_cap_with_long_message(self, tmp_project: Path):
        engine = _engine(tmp_project, max_prompt_length=600)
        asyncio.run(engine.refresh())
        message = "explain " * 500
        result = asyncio.run(engine.assemble_prompt(message))

        assert len(result.prompt) <= 600
        assert result.hard_truncated
        assert result.included == []
        # The question section survives up to the cap
        assert "=== User Question ===" in result.prompt
        assert message[:100] in result.prompt

    def test_two_references_within_small_budget(self, tmp_path: Path):
        (tmp_path / "a_notes.md").write_text("a" * 300)
        (tmp_path / "b_notes.md").write_text("b" * 300)
        engine = _engine(tmp_path, max_prompt_length=1000, max_file_content_length=200)
        asyncio.run(engine.refresh())
        assert asyncio.run(engine.add_reference_file(tmp_path / "a_notes.md"))
        assert asyncio.run(engine.add_reference_file(tmp_path / "b_notes.md"))

        result = asyncio.run(engine.assemble_prompt("Summarize the notes."))

        assert len(result.prompt) <= 1000
        assert result.included
        assert result.included[0].name == "a_notes.md"
        assert result.skipped_count == 2 - len(result.included)
        # Stats report raw sizes regardless of packing
        stats = engine.get_context_stats()
        assert stats.reference_files == 2
        assert stats.source_files == 0
        assert stats.total_size == 600

    @pytest.mark.parametrize("first", [300, 700, 1100, 1500])
    @pytest.mark.parametrize("second", [200, 900, 1600])
    def test_short_question_survives_overflow(self, tmp_path: Path, first: int, second: int):
        (tmp_path / "a.md").write_text("a" * first)
        (tmp_path / "b.md").write_text("b\n" * (second // 2))
        (tmp_path / "c.md").write_text("c" * 400)
        engine = _engine(tmp_path, max_prompt_length=2000)
        for name in ("a.md", "b.md", "c.md"):
            asyncio.run(engine.add_reference_file(tmp_path / name))

        message = "Where is the cache?"
        result = asyncio.run(engine.assemble_prompt(message))

        assert len(result.prompt) <= 2000
        assert not result.hard_truncated
        assert result.prompt.endswith("\n=== User Question ===\n" + message)

    def test_overflow_reported_in_prompt(self, tmp_path: Path):
        for name in ("a.md", "b.md", "c.md"):
            (tmp_path / name).write_text(name[0] * 900)
        engine = _engine(tmp_path, max_prompt_length=2000)
        for name in ("a.md", "b.md", "c.md"):
            asyncio.run(engine.add_reference_file(tmp_path / name))

        result = asyncio.run(engine.assemble_prompt("q"))
        assert result.skipped_count >= 1
        assert "Skipped" in result.prompt
        assert len(result.prompt) <= 2000

    def test_references_and_stats(self, tmp_project: Path):
        engine = _engine(tmp_project)
        asyncio.run(engine.refresh())
        readme = tmp_project / "README.md"
        readme.write_text("# Shop\n")

        assert asyncio.run(engine.add_reference_file(readme))
        assert not asyncio.run(engine.add_reference_file(tmp_project / "missing.md"))
        assert [u.name for u in engine.get_reference_files()] == ["README.md"]

        stats = engine.get_context_stats()
        assert stats.reference_files == 1
        assert stats.source_files == 5
        sources = engine.get_source_files()
        assert stats.total_size == len("# Shop\n") + sum(len(u.content) for u in sources)

        prompt = asyncio.run(engine.generate_full_prompt("q"))
        assert "=== Reference Files (Manually Added) ===" in prompt
        assert "# Shop" in prompt

        assert engine.remove_reference_file(readme)
        assert not engine.remove_reference_file(readme)
        asyncio.run(engine.add_reference_file(readme))
        engine.clear_reference_files()
        assert engine.get_reference_files() == []

    def test_ranked_files(self, tmp_project: Path):
        engine = _engine(tmp_project)
        asyncio.run(engine.refresh())
        ranked = engine.ranked_files()
        scores = [score for _, score in ranked]
        assert scores == sorted(scores, reverse=True)
        assert ranked[-1][0].name == "helpers.js"

    def test_on_file_saved(self, tmp_project: Path):
        engine = _engine(tmp_project)
        assert asyncio.run(engine.on_file_saved(tmp_project / "README.md")) is False
        assert engine.get_source_files() == []

        (tmp_project / "src" / "extra.ts").write_text("export const extra = 1;\n")
        assert asyncio.run(engine.on_file_saved(tmp_project / "src" / "extra.ts")) is True
        assert "extra.ts" in [u.name for u in engine.get_source_files()]

    def test_on_workspace_changed(self, tmp_project: Path):
        engine = _engine(tmp_project)
        asyncio.run(engine.on_workspace_changed())
        assert len(engine.get_source_files()) == 5

    def test_concurrent_refresh_and_prompt(self, tmp_project: Path):
        engine = _engine(tmp_project)

        async def run():
            _, prompt = await asyncio.gather(engine.refresh(), engine.generate_full_prompt("q"))
            return prompt

        prompt = asyncio.run(run())
        assert prompt.endswith("q")

    def test_config_change_applies_to_next_prompt(self, tmp_project: Path, caplog):
        config = ConfigSource()
        engine = ContextEngine(LocalWorkspace(tmp_project), config)
        asyncio.run(engine.refresh())

        with caplog.at_level(logging.INFO, logger="promptpack.context"):
            config.update(max_prompt_length=400)
        assert "Context limits changed" in caplog.text

        result = asyncio.run(engine.assemble_prompt("q"))
        assert len(result.prompt) <= 400

    def test_close_unsubscribes(self, tmp_project: Path, caplog):
        config = ConfigSource()
        engine = ContextEngine(LocalWorkspace(tmp_project), config)
        engine.close()
        with caplog.at_level(logging.INFO, logger="promptpack.context"):
            config.update(max_context_files=10)
        assert "Context limits changed" not in caplog.text
