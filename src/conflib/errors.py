"""Error message helpers for confctl."""

from __future__ import annotations

from .config import ConfigError, MappingError, MaterializeError, ParseError, ValidationError


def format_config_error(error: Exception) -> str:
    """Format a user-friendly message for a fatal configuration error."""
    error_str = str(error)

    if isinstance(error, MaterializeError):
        return (
            f"Could not create the configuration file: {error_str}\n"
            "Check that the directory is writable or pass another path with -c/--config."
        )

    if isinstance(error, ParseError):
        return (
            f"The configuration file is not valid INI: {error_str}\n"
            "Every key must live under a [Section] header as 'Key = Value'."
        )

    if isinstance(error, MappingError):
        return (
            f"Configuration value has the wrong type: {error_str}\n"
            f"Fix '{error.key}' in section [{error.section}]."
        )

    if isinstance(error, ValidationError):
        issue = error.issue
        return (
            f"Configuration value out of range: {error_str}\n"
            f"'{issue.key}' in section [{issue.section}] must satisfy: {issue.rule}."
        )

    if isinstance(error, ConfigError):
        return f"Configuration error: {error_str}"

    return f"Unexpected error while loading configuration: {error_str}"


def suggest_troubleshooting_steps(error: Exception) -> list[str]:
    """Suggest troubleshooting steps based on the error type."""
    suggestions = []

    if isinstance(error, MaterializeError):
        suggestions.extend([
            "Create the parent directory by hand and retry",
            "Set CONFCTL_CONFIG to a writable location",
        ])

    elif isinstance(error, ParseError):
        suggestions.extend([
            "Look for lines outside any [Section] header",
            "Make sure the file is saved as UTF-8",
        ])

    elif isinstance(error, (MappingError, ValidationError)):
        suggestions.extend([
            "Compare the value against the defaults shown by 'confctl show' on a fresh file",
            "Remove the key to fall back to its default",
        ])

    if not suggestions:
        suggestions.extend([
            "Verify your configuration file is correct",
            "Delete the file to regenerate a default one",
        ])

    return suggestions
