"""
xopacity

Query, set, adjust, toggle and clear the opacity of X11 windows through
the _NET_WM_WINDOW_OPACITY property.
"""

__version__ = "1.0.0"
__author__ = "NixOS Configuration Team"
