"""Custom exceptions for promptpack."""


class PromptPackError(Exception):
    """Base exception for all promptpack errors."""


class ConfigError(PromptPackError):
    """Configuration-related errors."""


class ParserError(PromptPackError):
    """Structural extraction errors."""


class WorkspaceError(PromptPackError):
    """Workspace enumeration errors."""


class FileReadError(PromptPackError):
    """Raised when a file cannot be read."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        message = f"Could not read {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
