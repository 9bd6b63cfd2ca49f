"""CLI package: command definitions, output management and error types."""

from .errors import CLIError, ErrorCategory, handle_exception
from .output import OutputConfig, OutputManager, should_use_color

__all__ = [
    "CLIError",
    "ErrorCategory",
    "handle_exception",
    "OutputConfig",
    "OutputManager",
    "should_use_color",
]
