"""Exception hierarchy for media-reflink."""

from __future__ import annotations


class ReflinkError(Exception):
    """Base exception for all media-reflink errors."""


class ConfigError(ReflinkError):
    """Invalid or missing configuration."""


class StateError(ReflinkError):
    """Mapping state file read/write error."""


class LibraryError(ReflinkError):
    """The library or source root cannot be listed."""


class PlatformError(ReflinkError):
    """Operation not supported on this platform."""


class ExternalToolError(ReflinkError):
    """A copy subprocess exited non-zero. command is the failed argv."""

    def __init__(
        self, tool: str, exit_code: int, stderr: str, command: list[str] | None = None,
    ) -> None:
        self.tool = tool
        self.exit_code = exit_code
        self.stderr = stderr
        self.command = list(command) if command else [tool]
        detail = stderr or "no error output"
        super().__init__(f"`{' '.join(self.command)}` failed ({exit_code}): {detail}")
