"""Command-line interface for promptpack."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from promptpack import __version__
from promptpack.config import (
    ConfigSource,
    ProjectConfig,
    find_project_root,
    load_config,
    save_config,
    set_config_value,
)
from promptpack.context.engine import ContextEngine
from promptpack.exceptions import ConfigError
from promptpack.ui.console import Console
from promptpack.workspace import LocalWorkspace

console = Console()
# Diagnostics go to stderr so that `promptpack prompt` output can be piped
err_console = Console(stderr=True)


def _get_project_root(path: str | None = None, required: bool = False) -> Path:
    """Resolve the project root: --path, then a .promptpack dir, then cwd."""
    if path:
        root = Path(path).resolve()
        if not root.exists():
            err_console.error(f"Path does not exist: {path}")
            sys.exit(1)
        return root

    root = find_project_root()
    if root is None:
        if required:
            err_console.error(
                "No promptpack project found. Run 'promptpack init' first, "
                "or specify a path with --path."
            )
            sys.exit(1)
        return Path.cwd().resolve()
    return root


def _load_project_config(root: Path) -> ProjectConfig:
    try:
        return load_config(root)
    except ConfigError as e:
        err_console.error(str(e))
        sys.exit(1)


async def _prepare_engine(root: Path, refs: tuple[str, ...]) -> ContextEngine:
    """Build an engine for `root`, collect sources and add reference files."""
    config = ConfigSource(_load_project_config(root).context)
    engine = ContextEngine(LocalWorkspace(root), config)
    await engine.refresh()
    for ref in refs:
        if not await engine.add_reference_file(ref):
            err_console.warning(f"Could not read reference file: {ref}")
    return engine


@click.group()
@click.version_option(version=__version__, prog_name="promptpack")
@click.option("--verbose", "-v", is_flag=True, help="Show log output.")
def main(verbose: bool):
    """promptpack - budgeted prompt context for your codebase."""
    if verbose:
        err_console.enable_logging()


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
def init(path: str | None):
    """Write a default configuration for a project."""
    root = Path(path or ".").resolve()
    if not root.exists():
        err_console.error(f"Path does not exist: {root}")
        sys.exit(1)

    console.banner()
    config = _load_project_config(root)
    config.name = root.name
    config.root_path = str(root)
    save_config(root, config)
    console.success(f"Configuration saved to {root / '.promptpack'}")


@main.command()
@click.argument("message")
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--ref", "-r", "refs", multiple=True, help="Reference file (can specify multiple).")
@click.option("--output", "-o", default=None, help="Write the prompt to a file instead of stdout.")
def prompt(message: str, path: str | None, refs: tuple[str, ...], output: str | None):
    """Assemble the full prompt for MESSAGE.

    Examples:

        promptpack prompt "How does the login flow work?"

        promptpack prompt "Review this design" --ref docs/design.md -o prompt.txt
    """
    root = _get_project_root(path)

    async def run():
        engine = await _prepare_engine(root, refs)
        return await engine.assemble_prompt(message)

    result = asyncio.run(run())

    if output:
        Path(output).write_text(result.prompt)
        err_console.success(f"Prompt written to {output}")
    else:
        click.echo(result.prompt)
    err_console.show_prompt_summary(result)


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--ref", "-r", "refs", multiple=True, help="Reference file (can specify multiple).")
def stats(path: str | None, refs: tuple[str, ...]):
    """Show context statistics."""
    root = _get_project_root(path)
    engine = asyncio.run(_prepare_engine(root, refs))
    console.show_stats(engine.get_context_stats())


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--ref", "-r", "refs", multiple=True, help="Reference file (can specify multiple).")
def files(path: str | None, refs: tuple[str, ...]):
    """List context files in packing order with their priority."""
    root = _get_project_root(path)
    engine = asyncio.run(_prepare_engine(root, refs))
    console.show_ranked_files(engine.ranked_files())


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--max-len", "-n", default=None, type=int, help="Digest length cap.")
def summarize(file: str, path: str | None, max_len: int | None):
    """Print the structural digest of FILE."""
    from promptpack.summarize import detect_language, summarize as summarize_content
    from promptpack.workspace import read_text

    root = _get_project_root(path)
    if max_len is None:
        max_len = _load_project_config(root).context.max_file_content_length

    language = detect_language(file)
    digest = summarize_content(read_text(file), language, max_len)
    console.info(f"{file} ({language.value}, {len(digest):,} chars)")
    console.code(digest.strip("\n"))


@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_cmd(action: str, key: str | None, value: str | None, path: str | None):
    """Manage promptpack configuration."""
    root = _get_project_root(path, required=True)
    config = _load_project_config(root)

    if action == "show":
        console.console.print_json(json.dumps(config.model_dump(), indent=2))
    elif action == "get":
        if not key:
            err_console.error("Usage: promptpack config get <key>")
            sys.exit(1)
        data = config.model_dump()
        for part in key.split("."):
            if isinstance(data, dict) and part in data:
                data = data[part]
            else:
                err_console.error(f"Unknown key: {key}")
                sys.exit(1)
        console.console.print(f"{key} = {data}")
    elif action == "set":
        if not key or value is None:
            err_console.error("Usage: promptpack config set <key> <value>")
            sys.exit(1)
        try:
            # Try to parse as JSON for non-string values
            try:
                parsed_value = json.loads(value)
            except json.JSONDecodeError:
                parsed_value = value

            config = set_config_value(config, key, parsed_value)
            save_config(root, config)
            console.success(f"Set {key} = {parsed_value}")
        except KeyError:
            err_console.error(f"Unknown config key: {key}")
            sys.exit(1)
        except ConfigError as e:
            err_console.error(str(e))
            sys.exit(1)


if __name__ == "__main__":
    main()
