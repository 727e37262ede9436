"""System clipboard access via pyperclip."""

from __future__ import annotations

from collections.abc import Callable

import pyperclip

ClipboardWriter = Callable[[str], None]


def write_clipboard(text: str) -> None:
    """Raises `pyperclip.PyperclipException` if no clipboard mechanism is available."""
    pyperclip.copy(text)
