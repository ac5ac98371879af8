"""Configuration management for promptpack."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from promptpack.exceptions import ConfigError

PROMPTPACK_DIR = ".promptpack"
CONFIG_FILE = "config.json"


class ContextConfig(BaseModel):
    """Budget and collection settings for context assembly."""

    max_context_files: int = Field(default=50, gt=0)
    max_prompt_length: int = Field(default=50000, gt=0)
    max_file_content_length: int = Field(default=3000, gt=0)
    extensions: list[str] = Field(
        default_factory=lambda: [
            "js", "ts", "jsx", "tsx", "py", "java", "cpp", "c",
            "cs", "php", "rb", "go", "rs", "swift", "kt",
        ]
    )
    exclude_patterns: list[str] = Field(
        default_factory=lambda: [
            "node_modules",
            "__pycache__",
            ".git",
            ".promptpack",
            "dist",
            "build",
            ".venv",
            "venv",
            "vendor",
            "*.min.js",
        ]
    )


class ProjectConfig(BaseModel):
    """Full project configuration."""

    name: str = ""
    root_path: str = "."
    context: ContextConfig = Field(default_factory=ContextConfig)


class BudgetLimits(BaseModel):
    """The three numeric limits, frozen for the duration of one operation."""

    model_config = ConfigDict(frozen=True)

    max_files: int
    max_prompt_chars: int
    max_file_chars: int

    @classmethod
    def from_config(cls, config: ContextConfig) -> BudgetLimits:
        return cls(
            max_files=config.max_context_files,
            max_prompt_chars=config.max_prompt_length,
            max_file_chars=config.max_file_content_length,
        )


ConfigListener = Callable[[ContextConfig], None]


class ConfigSource:
    """Holds the live context configuration and notifies listeners on change.

    Readers take a copy with `snapshot()` or `limits()` at the start of an
    operation; later updates never affect a copy already handed out.
    """

    def __init__(self, config: ContextConfig | None = None) -> None:
        self._config = config or ContextConfig()
        self._listeners: list[ConfigListener] = []

    @classmethod
    def from_project(cls, root: Path) -> ConfigSource:
        return cls(load_config(root).context)

    def snapshot(self) -> ContextConfig:
        return self._config.model_copy(deep=True)

    def limits(self) -> BudgetLimits:
        return BudgetLimits.from_config(self._config)

    def subscribe(self, listener: ConfigListener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **changes: Any) -> ContextConfig:
        """Validate and apply changes, then fire the change event."""
        data = self._config.model_dump()
        for key in changes:
            if key not in data:
                raise KeyError(f"Invalid config key: {key}")
        data.update(changes)
        try:
            self._config = ContextConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid context configuration: {e}") from e

        for listener in list(self._listeners):
            listener(self.snapshot())
        return self.snapshot()


def find_project_root(start: Path | None = None) -> Path | None:
    """Walk up from `start` looking for a .promptpack directory."""
    current = (start or Path.cwd()).resolve()
    while current != current.parent:
        if (current / PROMPTPACK_DIR).is_dir():
            return current
        current = current.parent
    if (current / PROMPTPACK_DIR).is_dir():
        return current
    return None


def get_promptpack_dir(root: Path) -> Path:
    """Get the .promptpack directory for a project root."""
    return root / PROMPTPACK_DIR


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from .promptpack/config.json, defaulting when absent."""
    config_path = get_promptpack_dir(root) / CONFIG_FILE
    if not config_path.exists():
        return ProjectConfig(name=root.name, root_path=str(root))
    try:
        data = json.loads(config_path.read_text())
        return ProjectConfig(**data)
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise ConfigError(f"Malformed config file {config_path}: {e}") from e


def save_config(root: Path, config: ProjectConfig) -> None:
    """Save configuration to .promptpack/config.json."""
    pp_dir = get_promptpack_dir(root)
    pp_dir.mkdir(parents=True, exist_ok=True)
    config_path = pp_dir / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2))


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Set a nested config value using dot notation (e.g., 'context.max_prompt_length')."""
    parts = key.split(".")
    data = config.model_dump()
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    target[parts[-1]] = value
    try:
        return ProjectConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {e}") from e
