"""
X11 window system client.

Thin wrapper around the xprop and xwininfo utilities. Every call is a
one-shot blocking subprocess; nothing is cached between calls since other
clients may create or destroy windows at any time.
"""

import logging
import re
import subprocess
from typing import List, Optional, Sequence

from .config import Config
from .errors import (
    PropertyWriteError,
    WindowQueryError,
    WindowSystemUnavailable,
    WindowTreeLookupError,
)
from .models import WindowInfo, WindowNode

logger = logging.getLogger(__name__)

HEX_ID = r'(0x[0-9a-fA-F]+)'

# "xwininfo: Window id: 0x2a00003 "Terminal""
WINDOW_ID_RE = re.compile(r'Window id:\s*' + HEX_ID)
ROOT_ID_RE = re.compile(r'Root window id:\s*' + HEX_ID)
PARENT_ID_RE = re.compile(r'Parent window id:\s*' + HEX_ID)
# "     0x1e00007 "Firefox": ("Navigator" "firefox")  1920x1080+0+0  +0+0"
TREE_LINE_RE = re.compile(r'^(\s+)' + HEX_ID + r'\s(?:"(.*)": \(|\(has no name\))')


def _parse_id(text: str) -> int:
    return int(text, 16)


class X11Client:
    """Query/set interface to the X server through command-line utilities."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def _display_args(self) -> List[str]:
        return ["-display", self.config.display] if self.config.display else []

    def _run(self, command: str, args: Sequence[str]) -> subprocess.CompletedProcess:
        argv = [command, *self._display_args(), *args]
        logger.debug(f"Running: {' '.join(argv)}")
        try:
            return subprocess.run(argv, capture_output=True, text=True)
        except FileNotFoundError:
            logger.debug(f"{command} command not found")
            raise WindowSystemUnavailable(command)

    def _xprop(self, *args: str) -> subprocess.CompletedProcess:
        return self._run(self.config.xprop, args)

    def _xwininfo(self, *args: str) -> subprocess.CompletedProcess:
        return self._run(self.config.xwininfo, args)

    # Properties

    def get_property(self, window: int, name: str) -> Optional[int]:
        """
        Read a CARDINAL property.

        Returns:
            The property value, or None when the window does not have it

        Raises:
            WindowQueryError: If xprop fails (e.g. BadWindow)
        """
        result = self._xprop("-id", str(window), "-notype", name)
        if result.returncode != 0:
            raise WindowQueryError("get_property", result.stderr.strip() or f"xprop exited with {result.returncode}")

        # Output: "_NET_WM_WINDOW_OPACITY = 3221225472" or
        # "_NET_WM_WINDOW_OPACITY:  not found."
        output = result.stdout.strip()
        if " = " not in output:
            return None

        try:
            return int(output.split(" = ", 1)[1].split(",")[0].strip())
        except ValueError:
            logger.warning(f"Could not parse xprop output for window {window:#x}: {output}")
            return None

    def set_property(self, window: int, name: str, value: int) -> None:
        result = self._xprop("-id", str(window), "-f", name, "32c", "-set", name, str(value))
        if result.returncode != 0:
            raise PropertyWriteError(window, "set", result.stderr.strip() or "xprop failed", result.returncode)

    def remove_property(self, window: int, name: str) -> None:
        result = self._xprop("-id", str(window), "-remove", name)
        if result.returncode != 0:
            raise PropertyWriteError(window, "remove", result.stderr.strip() or "xprop failed", result.returncode)

    # Hierarchy

    def get_window_info(self, window: int) -> WindowInfo:
        """
        Look up a window's root and parent.

        Raises:
            WindowTreeLookupError: If xwininfo fails or its output lacks a root id
        """
        result = self._xwininfo("-id", str(window), "-children")
        if result.returncode != 0:
            raise WindowTreeLookupError(result.stderr.strip() or "xwininfo failed", window)

        root = ROOT_ID_RE.search(result.stdout)
        if not root:
            raise WindowTreeLookupError("no root window in xwininfo output", window)

        parent = PARENT_ID_RE.search(result.stdout)
        parent_id = _parse_id(parent.group(1)) if parent else None
        # The root window reports its parent as 0x0 (none)
        return WindowInfo(id=window, root=_parse_id(root.group(1)), parent=parent_id or None)

    def enumerate_tree(self, root: Optional[int] = None) -> List[WindowNode]:
        """
        Depth-first listing of every window below root (default: the root window).

        Raises:
            WindowTreeLookupError: If the tree cannot be queried
        """
        target = ["-id", str(root)] if root is not None else ["-root"]
        result = self._xwininfo(*target, "-tree")
        if result.returncode != 0:
            raise WindowTreeLookupError(result.stderr.strip() or "xwininfo -tree failed", root)
        return parse_tree(result.stdout)

    # Selection

    def get_active_window(self) -> int:
        result = self._xprop("-root", "_NET_ACTIVE_WINDOW")
        if result.returncode != 0:
            raise WindowQueryError("get_active_window", result.stderr.strip() or "xprop failed")

        # Output: "_NET_ACTIVE_WINDOW(WINDOW): window id # 0x2a00003"
        match = re.search(HEX_ID + r'\s*$', result.stdout.strip())
        if not match or _parse_id(match.group(1)) == 0:
            raise WindowQueryError("get_active_window", "no window has the input focus")
        return _parse_id(match.group(1))

    def pick_window_interactively(self) -> int:
        """Wait for the user to click a window and return its id."""
        result = self._xwininfo()
        if result.returncode != 0:
            raise WindowQueryError("pick_window", result.stderr.strip() or "window selection aborted")

        match = WINDOW_ID_RE.search(result.stdout)
        if not match:
            raise WindowQueryError("pick_window", "no window id in xwininfo output")
        return _parse_id(match.group(1))

    def find_window_by_name(self, pattern: str) -> Optional[int]:
        """First window, in tree order, whose name contains pattern."""
        for node in self.enumerate_tree():
            if node.name is not None and pattern in node.name:
                return node.id
        return None


def parse_tree(output: str) -> List[WindowNode]:
    """
    Parse ``xwininfo -tree`` output into (id, parent, name) nodes.

    The header names the window the listing starts from; each nesting
    level below it is indented by three more spaces.
    """
    header = WINDOW_ID_RE.search(output)
    if not header:
        raise WindowTreeLookupError("no window id in xwininfo -tree output")

    # (indent, window id) of the open ancestors
    stack = [(-1, _parse_id(header.group(1)))]
    nodes: List[WindowNode] = []

    for line in output.splitlines():
        match = TREE_LINE_RE.match(line)
        if not match:
            continue
        indent = len(match.group(1))
        window = _parse_id(match.group(2))

        while stack[-1][0] >= indent:
            stack.pop()
        nodes.append(WindowNode(id=window, parent=stack[-1][1], name=match.group(3)))
        stack.append((indent, window))

    return nodes
