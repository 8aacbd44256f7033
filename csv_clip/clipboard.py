from __future__ import annotations

import pyperclip


class ClipboardError(RuntimeError):
    pass


class SystemClipboard:
    """Writes to the operating system clipboard in a single call."""

    def write_all(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as exc:
            raise ClipboardError(f"Could not write to the clipboard: {exc}") from exc
