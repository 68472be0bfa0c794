"""
Data models for xopacity.

All models use Pydantic v2 for validation and type safety.
"""

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


OPACITY_PROPERTY = "_NET_WM_WINDOW_OPACITY"

# Fully opaque in the 32-bit CARDINAL encoding of _NET_WM_WINDOW_OPACITY
OPAQUE = 0xFFFFFFFF

OPACITY_PATTERN = re.compile(r'^([+-])?(\d+)(%)?$')


class Action(str, Enum):
    """What to do with the target window's opacity."""
    SET = "set"
    GET = "get"
    DELETE = "delete"
    TOGGLE = "toggle"
    RESET = "reset"


class SelectionMode(str, Enum):
    """How the target window is chosen."""
    INTERACTIVE = "interactive"  # Click on a window
    CURRENT = "current"          # Focused window (_NET_ACTIVE_WINDOW)
    NAME = "name"                # Window name substring
    ID = "id"                    # Explicit X11 window id


class OpacityOperand(BaseModel):
    """Opacity value as typed by the user, e.g. 75, +10 or -5%."""

    value: int = Field(..., ge=0, description="Magnitude in percent")
    sign: Optional[str] = Field(None, description="'+' or '-' for a relative adjustment")
    percent: bool = Field(False, description="Whether a trailing % was given")

    @field_validator('sign')
    @classmethod
    def validate_sign(cls, v: Optional[str]) -> Optional[str]:
        if v not in (None, "+", "-"):
            raise ValueError(f"Invalid sign: {v}")
        return v

    @classmethod
    def matches(cls, token: str) -> bool:
        """Whether token looks like an opacity value."""
        return OPACITY_PATTERN.match(token) is not None

    @classmethod
    def parse(cls, token: str) -> "OpacityOperand":
        """Parse an opacity token, raising ValueError when it is not one."""
        match = OPACITY_PATTERN.match(token)
        if not match:
            raise ValueError(f"Invalid opacity value: {token!r}")
        sign, digits, percent = match.groups()
        return cls(value=int(digits), sign=sign, percent=percent is not None)

    @property
    def is_relative(self) -> bool:
        return self.sign is not None

    @property
    def delta(self) -> int:
        """Signed value; equal to value for absolute operands."""
        return -self.value if self.sign == "-" else self.value

    def apply_to(self, current: int) -> int:
        """Target percentage given the current one, clamped to [0, 100]."""
        if self.is_relative:
            return clamp_percent(current + self.delta)
        return clamp_percent(self.value)

    def __str__(self) -> str:
        return f"{self.sign or ''}{self.value}{'%' if self.percent else ''}"


class CanonicalRequest(BaseModel):
    """
    Fully normalized invocation.

    At most one selection mode and one operand are present; the mode's
    companion field (window_name or window_id) is set only for that mode.
    """

    action: Action = Field(Action.SET, description="Requested action")
    mode: SelectionMode = Field(SelectionMode.INTERACTIVE, description="Window selection mode")
    window_name: Optional[str] = Field(None, description="Name pattern for NAME mode")
    window_id: Optional[str] = Field(None, description="Raw window id for ID/CURRENT mode")
    opacity: Optional[OpacityOperand] = Field(None, description="Opacity operand")
    show_help: bool = Field(False, description="Print usage and exit")

    @model_validator(mode='after')
    def check_selection(self) -> "CanonicalRequest":
        if self.mode == SelectionMode.NAME and self.window_name is None:
            raise ValueError("NAME mode requires window_name")
        if self.mode == SelectionMode.ID and self.window_id is None:
            raise ValueError("ID mode requires window_id")
        return self


class WindowInfo(BaseModel):
    """Position of a single window in the hierarchy."""

    id: int = Field(..., description="X11 window id")
    root: int = Field(..., description="Root window of the window's screen")
    parent: Optional[int] = Field(None, description="Parent window id, None for the root")

    @property
    def is_root(self) -> bool:
        return self.id == self.root

    @property
    def is_top_level(self) -> bool:
        """Direct child of the root window."""
        return self.parent is not None and self.parent == self.root


class WindowNode(BaseModel):
    """One entry of a depth-first window tree listing."""

    id: int
    parent: int
    name: Optional[str] = None


def clamp_percent(value: int) -> int:
    """Saturate a percentage to [0, 100]."""
    return max(0, min(100, value))


def percent_to_cardinal(percent: int) -> int:
    """Scale a percentage to the 32-bit property value, rounding toward zero."""
    return clamp_percent(percent) * OPAQUE // 100


def cardinal_to_percent(value: int) -> int:
    """Scale a 32-bit property value back to the nearest percentage."""
    return clamp_percent((value * 100 + OPAQUE // 2) // OPAQUE)
