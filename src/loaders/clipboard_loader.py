"""
Clipboard sink for rendered copy blocks.

Tries the platform clipboard command first; when that is missing or fails,
falls back to a hidden Tk window's clipboard buffer. If both fail the copy
is reported as ClipboardWriteFailed and nothing else changes.
"""

import shutil
import subprocess
import sys
from typing import Callable, Optional

from rich.console import Console

from src.errors import ClipboardWriteFailed

console = Console()

# First command found on PATH wins
CLIPBOARD_COMMANDS = {
    "darwin": [["pbcopy"]],
    "win32": [["clip"]],
    "linux": [
        ["wl-copy"],
        ["xclip", "-selection", "clipboard"],
        ["xsel", "--clipboard", "--input"],
    ],
}

Writer = Callable[[str], None]


def find_clipboard_command(platform: Optional[str] = None) -> Optional[list[str]]:
    """Clipboard command available on this machine, or None."""
    platform = platform or sys.platform
    key = "linux" if platform.startswith("linux") else platform
    for command in CLIPBOARD_COMMANDS.get(key, []):
        if shutil.which(command[0]):
            return command
    return None


def command_writer(text: str) -> None:
    """Pipe text into the platform clipboard command."""
    command = find_clipboard_command()
    if command is None:
        raise ClipboardWriteFailed("No clipboard command available")
    try:
        subprocess.run(command, input=text, text=True, check=True, timeout=5)
    except (OSError, subprocess.SubprocessError) as e:
        raise ClipboardWriteFailed(f"{command[0]} failed: {e}") from e


def buffer_writer(text: str) -> None:
    """Copy through a transient, withdrawn Tk window."""
    try:
        import tkinter
    except ImportError as e:
        raise ClipboardWriteFailed("tkinter is not available") from e

    try:
        root = tkinter.Tk()
    except tkinter.TclError as e:
        raise ClipboardWriteFailed(f"No display for clipboard buffer: {e}") from e
    try:
        root.withdraw()
        root.clipboard_clear()
        root.clipboard_append(text)
        root.update()
    except tkinter.TclError as e:
        raise ClipboardWriteFailed(f"Clipboard buffer rejected text: {e}") from e
    finally:
        root.destroy()


class ClipboardLoader:
    """Writes text to the clipboard with a fallback path."""

    def __init__(self, primary: Optional[Writer] = None, fallback: Optional[Writer] = None):
        self.primary = primary or command_writer
        self.fallback = fallback or buffer_writer

    def copy(self, text: str, label: str = "Copy block") -> str:
        """
        Copy text to the clipboard.

        Returns:
            "command" or "buffer", whichever path succeeded

        Raises:
            ClipboardWriteFailed: both paths failed
        """
        try:
            self.primary(text)
            console.print(f"[green]✓ {label} sent to clipboard[/green]")
            return "command"
        except ClipboardWriteFailed as e:
            console.print(f"[dim]{e}; trying clipboard buffer[/dim]")

        try:
            self.fallback(text)
        except ClipboardWriteFailed as e:
            console.print("[red]Couldn't copy. Select & copy manually.[/red]")
            raise ClipboardWriteFailed(f"{label} was not copied: {e}") from e
        console.print(f"[green]✓ {label} sent to clipboard[/green]")
        return "buffer"
