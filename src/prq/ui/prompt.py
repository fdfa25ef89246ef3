"""Interactive prompts and editor sessions."""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

import click

from ..core.errors import EnvironmentSetupError


def prompt(label: str, hidden: bool = False) -> str:
    """
    Ask the user for a value on the terminal.

    Args:
        label: Prompt label
        hidden: Suppress echo (for passwords)

    Returns:
        The entered text, possibly empty
    """
    return click.prompt(label, default="", show_default=False, hide_input=hidden).strip()


def comment_file(prefix: str) -> Path:
    """Create an empty temporary file for comment text, named after `prefix`."""
    safe_prefix = re.sub(r"[^A-Za-z0-9_-]", "-", prefix)
    fd, name = tempfile.mkstemp(prefix=f"prq-{safe_prefix}-", suffix=".txt")
    os.close(fd)
    return Path(name)


def edit_file(path: Path, editor: Optional[str] = None) -> str:
    """
    Open an editor on `path` and return the saved text.

    The editor is taken from `editor`, then $VISUAL/$EDITOR as click does.

    Raises:
        EnvironmentSetupError: If the editor could not be run
    """
    try:
        click.edit(filename=str(path), editor=editor)
    except click.ClickException as e:
        raise EnvironmentSetupError(e.format_message()) from e

    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")
