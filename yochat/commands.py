"""Command markup in model answers: stripping markers and extracting commands."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from loguru import logger

from yochat.console import console as default_console
from yochat.console import rich_escape
from yochat.errors import ClipboardError


@dataclass(frozen=True)
class Markers:
    open: str = "<command>"
    close: str = "</command>"

    def strip(self, text: str) -> str:
        """Remove every open and close marker, leaving the command text in place."""
        return text.replace(self.open, "").replace(self.close, "")


DEFAULT_MARKERS = Markers()


@lru_cache(maxsize=8)
def _command_pattern(markers: Markers) -> re.Pattern:
    # Non-greedy: each open marker pairs with the first close marker after it.
    return re.compile(re.escape(markers.open) + "(.*?)" + re.escape(markers.close), re.DOTALL)


def extract_commands(answer: str, markers: Markers = DEFAULT_MARKERS) -> list[str]:
    """Return the text between each open marker and the nearest following close marker.

    Matches are taken left to right and never overlap. An open marker with no
    close marker after it produces nothing.
    """
    return _command_pattern(markers).findall(answer)


def join_commands(commands: list[str]) -> str:
    return "\n".join(commands)


def copy_commands(commands: list[str], sink: Callable[[str], None], out=None) -> bool:
    """Hand the joined commands to the clipboard sink and report how it went.

    Returns True only when something was copied. An empty list never reaches
    the sink; a ClipboardError is printed, not raised.
    """
    if not commands:
        return False
    out = out or default_console
    try:
        sink(join_commands(commands))
    except ClipboardError as e:
        logger.debug("clipboard hand-off failed: {}", e)
        out.print(f"[err]Error copying to clipboard: {rich_escape(str(e))}[/err]")
        return False
    logger.debug("copied {} command(s) to clipboard", len(commands))
    out.print("\n[ok]Extracted commands copied to clipboard![/ok]")
    return True
