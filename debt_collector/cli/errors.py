"""Structured CLI errors with recovery suggestions."""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    CONFIGURATION = "configuration"  # Missing keys, invalid settings
    FILE_SYSTEM = "file_system"  # Repository or report path problems
    VALIDATION = "validation"  # Invalid arguments
    ANALYSIS = "analysis"  # Pipeline failures
    RUNTIME = "runtime"  # Unexpected errors


@dataclass
class CLIError(Exception):
    """Base class for CLI errors.

    Attributes:
        category: Error category for grouping.
        message: Human-readable error message.
        suggestion: Optional actionable recovery suggestion.
        details: Optional extra key/value context.
        exit_code: Process exit code.
    """

    category: ErrorCategory
    message: str
    suggestion: str | None = None
    details: dict[str, Any] | None = field(default_factory=dict)
    exit_code: int = 1

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def format(self, use_color: bool = True) -> str:
        red = "\033[91m" if use_color else ""
        cyan = "\033[96m" if use_color else ""
        dim = "\033[2m" if use_color else ""
        reset = "\033[0m" if use_color else ""

        lines = [f"{red}Error:{reset} {self.message}"]
        if self.suggestion:
            lines.append(f"{cyan}Suggestion:{reset} {self.suggestion}")
        if self.details:
            for key, value in self.details.items():
                lines.append(f"{dim}  {key}: {value}{reset}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format(use_color=False)


class RepositoryPathError(CLIError):
    def __init__(self, path: str):
        super().__init__(
            category=ErrorCategory.FILE_SYSTEM,
            message=f"Repository path does not exist: {path}",
            suggestion="Verify the path exists and you have read permissions",
            details={"path": path},
            exit_code=1,
        )


class ConfigurationError(CLIError):
    def __init__(self, message: str, config_file: str | None = None):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=message,
            suggestion="Check the settings file syntax and values",
            details={"config_file": config_file} if config_file else None,
            exit_code=1,
        )


class ReportWriteError(CLIError):
    def __init__(self, path: str, original_error: str):
        super().__init__(
            category=ErrorCategory.FILE_SYSTEM,
            message=f"Cannot write report to {path}: {original_error}",
            suggestion="Choose a writable --output location",
            details={"path": path},
            exit_code=1,
        )


class ValidationError(CLIError):
    """Invalid CLI arguments."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(
            category=ErrorCategory.VALIDATION,
            message=message,
            suggestion=suggestion or "Check the command syntax with --help",
            exit_code=2,
        )


def handle_exception(
    error: Exception,
    use_color: bool = True,
    verbose: bool = False,
) -> tuple[str, int]:
    """Convert any exception to formatted output and an exit code."""
    if isinstance(error, CLIError):
        message = error.format(use_color=use_color)
        exit_code = error.exit_code
    else:
        red = "\033[91m" if use_color else ""
        reset = "\033[0m" if use_color else ""
        message = f"{red}Error:{reset} {error}"
        exit_code = 1

    if verbose:
        message += "\n\nTraceback:\n" + traceback.format_exc()

    return message, exit_code
