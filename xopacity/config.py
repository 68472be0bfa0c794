"""Runtime configuration for xopacity.

Defaults suit a stock X11 session; every field can be overridden from the
environment with an XOPACITY_* variable.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .models import OPACITY_PROPERTY


@dataclass
class Config:
    """Complete xopacity configuration."""

    xprop: str = "xprop"
    xwininfo: str = "xwininfo"
    opacity_property: str = OPACITY_PROPERTY
    log_level: str = "WARNING"
    display: Optional[str] = None  # None inherits $DISPLAY

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Build configuration from XOPACITY_* environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            xprop=env.get("XOPACITY_XPROP", defaults.xprop),
            xwininfo=env.get("XOPACITY_XWININFO", defaults.xwininfo),
            opacity_property=env.get("XOPACITY_PROPERTY", defaults.opacity_property),
            log_level=env.get("XOPACITY_LOG_LEVEL", defaults.log_level),
            display=env.get("XOPACITY_DISPLAY") or None,
        )

    @property
    def logging_level(self) -> int:
        """Numeric logging level; unknown names fall back to WARNING."""
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.WARNING
