"""Shared rich console for everything yochat prints."""

import os
import sys

_console = None

THEME_STYLES = {
    "brand": "bold bright_cyan",
    "accent": "bold bright_blue",
    "muted": "dim",
    "ok": "bold bright_green",
    "warn": "bold yellow",
    "err": "bold red",
}


def make_console(**kwargs):
    """Build a Console carrying the yochat theme (tests pass file=/width= here)."""
    from rich.console import Console
    from rich.theme import Theme
    return Console(theme=Theme(THEME_STYLES), **kwargs)


def get_console():
    global _console
    if _console is None:
        _console = make_console()
    return _console


class LazyProxy:
    def __init__(self, loader):
        self._loader = loader
        self._obj = None
    def _get_obj(self):
        if self._obj is None:
            self._obj = self._loader()
        return self._obj
    def __getattr__(self, name):
        return getattr(self._get_obj(), name)


console = LazyProxy(get_console)


def rich_escape(text: str) -> str:
    from rich.markup import escape
    return escape(text)


def bootstrap_output_encoding() -> None:
    """Best-effort UTF-8 output on Windows so streamed answers never crash the console."""
    if os.name != "nt":
        return
    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if callable(reconfigure):
            try:
                reconfigure(encoding="utf-8", errors="replace")
            except (OSError, ValueError):
                pass
