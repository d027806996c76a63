"""Native "choose a folder" dialogs.

Each platform gets a small ``DirectoryPicker`` that shells out to the
system's own dialog tool:

- macOS: ``osascript`` (``choose folder``)
- Windows: PowerShell ``FolderBrowserDialog``
- Linux and other Unixes: ``zenity --file-selection --directory``

A cancelled dialog, an empty answer, or a missing tool all yield ``None``.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "Choose a directory"


class DirectoryPicker:
    """Base class: run a dialog command and parse the chosen path."""

    def command(self, prompt: str) -> list[str]:
        raise NotImplementedError

    def pick(self, prompt: str = DEFAULT_PROMPT) -> Path | None:
        """Show the dialog.

        Returns:
            Absolute path of the chosen directory, or ``None`` if the user
            cancelled or the dialog tool is unavailable.
        """
        args = self.command(prompt or DEFAULT_PROMPT)
        try:
            result = subprocess.run(args, capture_output=True, text=True)
        except FileNotFoundError:
            logger.warning("Directory picker not available: %s", args[0])
            return None

        chosen = result.stdout.strip()
        if result.returncode != 0 or not chosen:
            logger.debug("Directory picker cancelled (exit %d)", result.returncode)
            return None
        return Path(chosen).resolve()


class MacDirectoryPicker(DirectoryPicker):
    def command(self, prompt: str) -> list[str]:
        escaped = prompt.replace('"', '\\"')
        script = f'return POSIX path of (choose folder with prompt "{escaped}")'
        return ["osascript", "-e", script]


class WindowsDirectoryPicker(DirectoryPicker):
    def command(self, prompt: str) -> list[str]:
        escaped = prompt.replace('"', '`"')
        script = "\n".join(
            [
                "Add-Type -AssemblyName System.Windows.Forms",
                "$d = New-Object System.Windows.Forms.FolderBrowserDialog",
                f'$d.Description = "{escaped}"',
                "$d.ShowDialog() | Out-Null",
                "if ($d.SelectedPath) { $d.SelectedPath }",
            ]
        )
        return ["powershell", "-NoProfile", "-Command", script]


class ZenityDirectoryPicker(DirectoryPicker):
    def command(self, prompt: str) -> list[str]:
        return ["zenity", "--file-selection", "--directory", "--title", prompt]


def get_directory_picker(platform: str = sys.platform) -> DirectoryPicker:
    """Return the picker for *platform* (a ``sys.platform`` value)."""
    if platform == "darwin":
        return MacDirectoryPicker()
    if platform.startswith("win"):
        return WindowsDirectoryPicker()
    return ZenityDirectoryPicker()


def pick_directory(prompt: str = DEFAULT_PROMPT) -> Path | None:
    """Ask the user for a directory with the platform's native dialog."""
    return get_directory_picker(sys.platform).pick(prompt)
