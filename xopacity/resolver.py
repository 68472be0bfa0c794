"""
Window target resolver.

Maps a CanonicalRequest's selection mode to the id of a top-level window,
i.e. a direct child of the root window. Window managers reparent client
windows into frames, so whatever the user points at is walked up the
parent chain until the child of the root is reached.
"""

import logging
import re

from .errors import (
    AncestorNotFoundError,
    InternalError,
    InvalidIdentifierError,
    RootWindowSelectedError,
    WindowNotFoundError,
)
from .models import CanonicalRequest, SelectionMode

logger = logging.getLogger(__name__)

WINDOW_ID_PATTERN = re.compile(r'^\s*(?:(0[xX][0-9a-fA-F]+)|(\d+))\s*$')


def parse_window_id(text: str) -> int:
    """
    Parse a window id given as 0x-prefixed hexadecimal or decimal.

    Raises:
        InvalidIdentifierError: If text is not a well-formed, non-zero id
    """
    match = WINDOW_ID_PATTERN.match(text)
    if not match:
        raise InvalidIdentifierError(text)

    hex_id, dec_id = match.groups()
    window = int(hex_id, 16) if hex_id else int(dec_id, 10)
    if window == 0:
        raise InvalidIdentifierError(text)
    return window


class WindowResolver:
    """Resolve selection modes against a window system client."""

    def __init__(self, window_system):
        """
        Args:
            window_system: Object implementing the query interface of
                xopacity.x11.X11Client
        """
        self.window_system = window_system

    def resolve(self, request: CanonicalRequest) -> int:
        """Return the top-level window targeted by request."""
        window = self.resolve_raw(request)
        logger.debug(f"Selected window {window:#x} ({request.mode.value})")
        top_level = self.top_level(window)
        if top_level != window:
            logger.debug(f"Using top-level ancestor {top_level:#x} of {window:#x}")
        return top_level

    def resolve_raw(self, request: CanonicalRequest) -> int:
        """Return the window named by the selection mode, before the ancestor walk."""
        mode = request.mode

        if mode == SelectionMode.ID:
            return parse_window_id(request.window_id)

        if mode == SelectionMode.CURRENT:
            if request.window_id is not None:
                return parse_window_id(request.window_id)
            return self.window_system.get_active_window()

        if mode == SelectionMode.NAME:
            window = self.window_system.find_window_by_name(request.window_name)
            if window is None:
                raise WindowNotFoundError(request.window_name)
            return window

        if mode == SelectionMode.INTERACTIVE:
            return self.window_system.pick_window_interactively()

        raise InternalError(f"unhandled selection mode {mode!r}")

    def top_level(self, window: int) -> int:
        """
        Walk the parent chain up to the direct child of the root window.

        Raises:
            RootWindowSelectedError: If window is the root itself
            AncestorNotFoundError: If the chain ends or loops before the root
            WindowTreeLookupError: If a window in the chain cannot be queried
        """
        info = self.window_system.get_window_info(window)
        if info.is_root:
            raise RootWindowSelectedError(window)

        visited = {info.id}
        while not info.is_top_level:
            if info.parent is None or info.parent in visited:
                raise AncestorNotFoundError(window)
            visited.add(info.parent)
            info = self.window_system.get_window_info(info.parent)

        return info.id
