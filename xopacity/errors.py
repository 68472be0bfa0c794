"""
Error handling for xopacity.

Every failure the tool can report is an OpacityError subclass carrying a
structured code, a human-readable message, an optional recovery
suggestion and the exit status the CLI should terminate with.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(Enum):
    """
    Error codes for xopacity.

    - 1000-1099: Argument errors
    - 1100-1199: Window resolution errors
    - 1200-1299: Property store errors
    - 1300-1399: Environment errors
    - 1900: Internal errors
    """

    # Argument errors (1000-1099)
    PARSE_ERROR = 1000
    MISSING_OPERAND = 1001
    INVALID_IDENTIFIER = 1002

    # Window resolution errors (1100-1199)
    WINDOW_NOT_FOUND = 1100
    ROOT_WINDOW_SELECTED = 1101
    WINDOW_TREE_LOOKUP_FAILED = 1102
    ANCESTOR_NOT_FOUND = 1103

    # Property store errors (1200-1299)
    PROPERTY_WRITE_FAILED = 1200
    WINDOW_QUERY_FAILED = 1201

    # Environment errors (1300-1399)
    WINDOW_SYSTEM_UNAVAILABLE = 1300

    INTERNAL_ERROR = 1900


class OpacityError(Exception):
    """Base exception for all xopacity failures."""

    exit_status = 1

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize opacity error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            suggestion: Suggested recovery action
            context: Additional context for debugging
        """
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for structured output.

        Returns:
            Error dictionary with code, message, suggestion, and context
        """
        result = {
            "code": self.code.value,
            "message": self.message
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion

        if self.context:
            result["context"] = self.context

        return result


class ParseError(OpacityError):
    """Malformed or unknown option, or an option missing its value."""

    def __init__(self, message: str, option: Optional[str] = None):
        super().__init__(
            code=ErrorCode.PARSE_ERROR,
            message=message,
            suggestion="Run with --help to see the accepted options",
            context={"option": option} if option else None
        )
        self.option = option


class MissingOperandError(OpacityError):
    """An action needs an opacity value but none was given."""

    def __init__(self, action: str):
        super().__init__(
            code=ErrorCode.MISSING_OPERAND,
            message=f"Action '{action}' requires an opacity value",
            suggestion="Pass a value such as 75, +10 or -10% (or use -o VALUE)",
            context={"action": action}
        )


class InvalidIdentifierError(OpacityError):
    """A window id is neither 0x-prefixed hexadecimal nor decimal."""

    def __init__(self, identifier: str):
        super().__init__(
            code=ErrorCode.INVALID_IDENTIFIER,
            message=f"Invalid window id: {identifier!r}",
            suggestion="Use a hexadecimal id like 0x2a00003 or a decimal id",
            context={"identifier": identifier}
        )


class WindowNotFoundError(OpacityError):
    """No window matched the requested name."""

    def __init__(self, pattern: str):
        super().__init__(
            code=ErrorCode.WINDOW_NOT_FOUND,
            message=f"No window found matching name {pattern!r}",
            context={"pattern": pattern}
        )


class RootWindowSelectedError(OpacityError):
    """The resolved window is the root window."""

    def __init__(self, window_id: int):
        super().__init__(
            code=ErrorCode.ROOT_WINDOW_SELECTED,
            message=f"Window {window_id:#x} is the root window; its opacity cannot be changed",
            suggestion="Select an application window instead of the desktop background",
            context={"window_id": window_id}
        )


class WindowTreeLookupError(OpacityError):
    """The window hierarchy could not be queried."""

    def __init__(self, reason: str, window_id: Optional[int] = None):
        context = {"reason": reason}
        if window_id is not None:
            context["window_id"] = window_id
        super().__init__(
            code=ErrorCode.WINDOW_TREE_LOOKUP_FAILED,
            message=f"Window tree lookup failed: {reason}",
            suggestion="Check that the window still exists and the X server is reachable",
            context=context
        )


class AncestorNotFoundError(OpacityError):
    """No top-level ancestor could be found for a window."""

    def __init__(self, window_id: int):
        super().__init__(
            code=ErrorCode.ANCESTOR_NOT_FOUND,
            message=f"No top-level ancestor found for window {window_id:#x}",
            context={"window_id": window_id}
        )


class PropertyWriteError(OpacityError):
    """Writing or removing a window property failed."""

    def __init__(self, window_id: int, operation: str, reason: str, returncode: Optional[int] = None):
        super().__init__(
            code=ErrorCode.PROPERTY_WRITE_FAILED,
            message=f"Failed to {operation} opacity on window {window_id:#x}: {reason}",
            suggestion="The window may have been closed or belong to another X client",
            context={"window_id": window_id, "operation": operation, "returncode": returncode}
        )
        self.returncode = returncode

    @property
    def exit_status(self) -> int:
        return self.returncode if self.returncode else 1


class WindowQueryError(OpacityError):
    """Reading from the window system failed for the primary target."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            code=ErrorCode.WINDOW_QUERY_FAILED,
            message=f"Window query '{operation}' failed: {reason}",
            context={"operation": operation, "reason": reason}
        )


class WindowSystemUnavailable(OpacityError):
    """A required X11 utility is not installed."""

    def __init__(self, command: str):
        super().__init__(
            code=ErrorCode.WINDOW_SYSTEM_UNAVAILABLE,
            message=f"{command} command not found",
            suggestion="Install the x11-utils package (xprop, xwininfo)",
            context={"command": command}
        )


class InternalError(OpacityError):
    """Control flow reached a branch that should be unreachable."""

    exit_status = 128

    def __init__(self, message: str):
        super().__init__(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {message}",
            suggestion="Please report this as a bug"
        )
