"""Terminal Utilities Module."""

import locale
import os
import sys
from functools import lru_cache

import colorama

__all__ = ["supports_color", "supports_utf8"]

_WINDOWS_ANSI_HINTS = ("ANSICON", "WT_SESSION")


@lru_cache(maxsize=1)
def supports_utf8() -> bool:
    """Check if the terminal supports UTF-8 encoding.

    Returns:
        bool: True if stdout encodes as UTF-8, False otherwise
    """
    encoding = sys.stdout.encoding or locale.getpreferredencoding(False)
    return encoding.lower().replace("-", "").startswith("utf")


def _windows_vt_enabled() -> bool:
    try:
        import winreg
    except ImportError:
        return False

    try:
        key = winreg.OpenKey(winreg.HKEY_CURRENT_USER, "Console")
        value, _ = winreg.QueryValueEx(key, "VirtualTerminalLevel")
    except FileNotFoundError:
        return False
    return value == 1


@lru_cache(maxsize=1)
def supports_color() -> bool:
    """Check if the terminal supports ANSI color codes.

    Output that is not a TTY (log collectors, pipes) never gets colors. On
    Windows, colors are only used when the console is known to handle them.

    Returns:
        bool: True if the terminal supports color, False otherwise
    """
    if not (hasattr(sys.stdout, "isatty") and sys.stdout.isatty()):
        return False
    if os.environ.get("NO_COLOR"):
        return False
    if sys.platform != "win32":
        return True

    return (
        getattr(colorama, "fixed_windows_console", False)
        or any(hint in os.environ for hint in _WINDOWS_ANSI_HINTS)
        or os.environ.get("TERM_PROGRAM") == "vscode"
        or _windows_vt_enabled()
    )
