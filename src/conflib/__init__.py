"""Core library for confctl.

Loads the INI configuration into typed records and runs the startup steps
(log level, remote bind points) used by the CLI.
"""

__all__ = [
    "bootstrap",
    "config",
    "defaults",
    "errors",
    "fs",
    "log",
    "records",
]
