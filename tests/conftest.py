"""
Pytest configuration and fixtures for xopacity tests.

FakeWindowSystem implements the same query/set interface as
xopacity.x11.X11Client on top of in-memory dictionaries.
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest

# Add repository root to Python path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from xopacity.errors import PropertyWriteError, WindowQueryError, WindowTreeLookupError
from xopacity.models import OPACITY_PROPERTY, WindowInfo, WindowNode, percent_to_cardinal

ROOT = 0x1e1
FRAME = 0x400001   # root -> FRAME
CLIENT = 0x400002  # root -> FRAME -> CLIENT
WIDGET = 0x400003  # root -> FRAME -> CLIENT -> WIDGET
OTHER = 0x500001   # root -> OTHER


class FakeWindowSystem:
    """In-memory window hierarchy and property store."""

    def __init__(self, root: int = ROOT):
        self.root = root
        self.parents: Dict[int, int] = {}
        self.names: Dict[int, Optional[str]] = {}
        self.properties: Dict[Tuple[int, str], int] = {}
        self.rejected: Set[int] = set()
        self.active_window: Optional[int] = None
        self.picked_window: Optional[int] = None
        self.tree_available = True
        self.calls: List[str] = []

    def add_window(self, window: int, parent: Optional[int] = None, name: Optional[str] = None) -> int:
        self.parents[window] = self.root if parent is None else parent
        self.names[window] = name
        return window

    def set_opacity(self, window: int, percent: int) -> None:
        self.properties[(window, OPACITY_PROPERTY)] = percent_to_cardinal(percent)

    def opacity(self, window: int) -> Optional[int]:
        return self.properties.get((window, OPACITY_PROPERTY))

    def _check_exists(self, window: int) -> None:
        if window != self.root and window not in self.parents:
            raise WindowQueryError("get_property", f"BadWindow {window:#x}")

    def get_property(self, window: int, name: str) -> Optional[int]:
        self.calls.append("get_property")
        self._check_exists(window)
        return self.properties.get((window, name))

    def set_property(self, window: int, name: str, value: int) -> None:
        self.calls.append("set_property")
        if window in self.rejected:
            raise PropertyWriteError(window, "set", "BadAccess", 3)
        self.properties[(window, name)] = value

    def remove_property(self, window: int, name: str) -> None:
        self.calls.append("remove_property")
        if window in self.rejected:
            raise PropertyWriteError(window, "remove", "BadAccess", 3)
        self.properties.pop((window, name), None)

    def get_window_info(self, window: int) -> WindowInfo:
        self.calls.append("get_window_info")
        if window == self.root:
            return WindowInfo(id=window, root=self.root, parent=None)
        if window not in self.parents:
            raise WindowTreeLookupError(f"BadWindow {window:#x}", window)
        return WindowInfo(id=window, root=self.root, parent=self.parents[window])

    def enumerate_tree(self, root: Optional[int] = None) -> List[WindowNode]:
        self.calls.append("enumerate_tree")
        if not self.tree_available:
            raise WindowTreeLookupError("xwininfo -tree failed")

        nodes: List[WindowNode] = []

        def walk(parent: int) -> None:
            for window, window_parent in self.parents.items():
                if window_parent == parent:
                    nodes.append(WindowNode(id=window, parent=parent, name=self.names[window]))
                    walk(window)

        walk(self.root if root is None else root)
        return nodes

    def get_active_window(self) -> int:
        self.calls.append("get_active_window")
        if self.active_window is None:
            raise WindowQueryError("get_active_window", "no window has the input focus")
        return self.active_window

    def pick_window_interactively(self) -> int:
        self.calls.append("pick_window_interactively")
        if self.picked_window is None:
            raise WindowQueryError("pick_window", "window selection aborted")
        return self.picked_window

    def find_window_by_name(self, pattern: str) -> Optional[int]:
        self.calls.append("find_window_by_name")
        for node in self.enumerate_tree():
            if node.name is not None and pattern in node.name:
                return node.id
        return None


@pytest.fixture
def window_system() -> FakeWindowSystem:
    """Root with a reparented client (FRAME > CLIENT > WIDGET) and one plain top-level window."""
    fake = FakeWindowSystem()
    fake.add_window(FRAME, name=None)
    fake.add_window(CLIENT, parent=FRAME, name="Terminal - ~/src")
    fake.add_window(WIDGET, parent=CLIENT, name=None)
    fake.add_window(OTHER, name="Firefox")
    return fake


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep XOPACITY_* variables from the developer's shell out of tests."""
    for name in ("XOPACITY_XPROP", "XOPACITY_XWININFO", "XOPACITY_PROPERTY",
                 "XOPACITY_LOG_LEVEL", "XOPACITY_DISPLAY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def xwininfo_tree_output() -> str:
    """Output of `xwininfo -root -tree` for a small session."""
    return '''
xwininfo: Window id: 0x1e1 (the root window) (has no name)

  Root window id: 0x1e1 (the root window) (has no name)
  Parent window id: 0x0 (none)
     3 children:
     0x400001 (has no name): ()  800x600+0+0  +0+0
        1 child:
        0x400002 "Terminal - ~/src": ("xterm" "XTerm")  800x580+0+20  +0+20
           1 child:
           0x400003 (has no name): ()  10x10+0+0  +0+20
     0x500001 "Firefox": ("Navigator" "firefox")  1920x1080+0+0  +0+0
     0x600001 "say \\"hi\\"": ("chat" "Chat")  300x200+5+5  +5+5

'''
