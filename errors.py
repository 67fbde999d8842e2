"""Structured error types for the workbench."""
from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional, Sequence


class ErrorType(Enum):
    """Classification of workbench errors."""

    FATAL = "fatal"
    RECOVERABLE = "recoverable"
    VALIDATION = "validation"


class WorkbenchError(Exception):
    """Base class for every error raised by the workbench."""

    def __init__(self, message: str, error_type: ErrorType = ErrorType.RECOVERABLE) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.message


class ConfigError(WorkbenchError):
    """Configuration could not be read or failed validation."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorType.FATAL)


class EnvExpansionError(ConfigError):
    """An environment reference in the configuration could not be expanded."""

    def __init__(self, variable: str, location: str, reason: str) -> None:
        self.variable = variable
        self.location = location
        self.reason = reason
        lines = [
            "Environment variable expansion failed",
            f"  Variable: {variable or '(none)'}",
            f"  Location: {location or '(root)'}",
            f"  Reason: {reason}",
        ]
        if variable:
            lines.extend(["", "Set the environment variable before starting the server:", f"  export {variable}=value"])
        super().__init__("\n".join(lines))


class InvalidArgumentsError(WorkbenchError):
    """Meta-operation arguments failed validation."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorType.VALIDATION)


class InvalidIdentifierError(WorkbenchError):
    """A flat tool identifier could not be decoded into three parts."""

    def __init__(self, value: str, reason: Optional[str] = None) -> None:
        self.value = value
        detail = reason or "expected 'toolbox__server__tool' with three non-empty parts"
        super().__init__(f"Invalid tool identifier '{value}': {detail}", ErrorType.VALIDATION)


class ToolboxNotFoundError(WorkbenchError):
    """The requested toolbox is not present in the configuration."""

    def __init__(self, toolbox: str, available: Sequence[str] = ()) -> None:
        self.toolbox = toolbox
        self.available = tuple(available)
        listing = ", ".join(self.available) if self.available else "(none)"
        super().__init__(
            f"Toolbox '{toolbox}' not found. Available toolboxes: {listing}",
            ErrorType.VALIDATION,
        )


class DownstreamConnectionError(WorkbenchError):
    """One or more downstream servers failed to start or complete the handshake."""

    def __init__(self, toolbox: str, failures: Mapping[str, str]) -> None:
        self.toolbox = toolbox
        self.failures = dict(failures)
        details = "; ".join(
            f"Failed to connect to server '{server}' in toolbox '{toolbox}': {reason}"
            for server, reason in self.failures.items()
        )
        super().__init__(details or f"Failed to connect toolbox '{toolbox}'")


class RoutingError(WorkbenchError):
    """Base class for failures resolving a ``(toolbox, server, name)`` triple."""

    def __init__(
        self,
        message: str,
        toolbox: str,
        server: Optional[str] = None,
        name: Optional[str] = None,
    ) -> None:
        self.toolbox = toolbox
        self.server = server
        self.name = name
        super().__init__(message)


class ToolboxNotOpenError(RoutingError):
    def __init__(self, toolbox: str, server: Optional[str] = None, name: Optional[str] = None) -> None:
        message = f"Toolbox '{toolbox}' is not open"
        if server is not None and name is not None:
            message += f" (requested tool '{name}' in server '{server}')"
        message += ". Open it with open_toolbox first."
        super().__init__(message, toolbox, server, name)


class ServerNotFoundError(RoutingError):
    def __init__(self, toolbox: str, server: str, name: str) -> None:
        super().__init__(
            f"Server '{server}' not found in toolbox '{toolbox}' (requested tool '{name}')",
            toolbox,
            server,
            name,
        )


class ToolNotFoundError(RoutingError):
    def __init__(self, toolbox: str, server: str, name: str) -> None:
        super().__init__(
            f"Tool '{name}' not found in server '{server}' (toolbox '{toolbox}')",
            toolbox,
            server,
            name,
        )


class DownstreamToolError(RoutingError):
    """The downstream tool failed; ``result`` keeps its original payload when there is one."""

    def __init__(
        self,
        toolbox: str,
        server: str,
        name: str,
        reason: str,
        *,
        result: object = None,
        code: Optional[int] = None,
    ) -> None:
        self.reason = reason
        self.result = result
        self.code = code
        super().__init__(
            f"Error executing tool '{name}' in server '{server}' (toolbox '{toolbox}'): {reason}",
            toolbox,
            server,
            name,
        )


__all__ = [
    "ConfigError",
    "DownstreamConnectionError",
    "DownstreamToolError",
    "EnvExpansionError",
    "ErrorType",
    "InvalidArgumentsError",
    "InvalidIdentifierError",
    "RoutingError",
    "ServerNotFoundError",
    "ToolNotFoundError",
    "ToolboxNotFoundError",
    "ToolboxNotOpenError",
    "WorkbenchError",
]
