"""Display and formatting for pull request data."""

from typing import Any, BinaryIO, Optional

import click
from rich.console import Console
from rich.rule import Rule
from rich.text import Text

RULE_WIDTH = 79


def _date_of(item: dict[str, Any]) -> str:
    return item.get("updated_at") or item.get("created_at") or ""


def _login_of(item: dict[str, Any]) -> str:
    return (item.get("user") or {}).get("login") or "unknown"


class DisplayManager:
    """
    Render command results on a rich console.

    Lines are never wrapped to the terminal width, so output stays greppable
    when piped.
    """

    def __init__(self, console: Optional[Console] = None, stream: Optional[BinaryIO] = None):
        """
        Initialize DisplayManager.

        Args:
            console: Rich console instance (stdout by default)
            stream: Binary stream for raw output such as patches (stdout by default)
        """
        self.console = console or Console()
        self.stream = stream

    def message(self, text: str, style: Optional[str] = None) -> None:
        """Print a plain line, optionally styled."""
        self.console.print(Text(text, style=style or ""), soft_wrap=True)

    def display_pull_list(self, repo: str, state: str, pulls: list[dict[str, Any]]) -> None:
        """
        Display a list of pull requests, one `number date title` line each.

        Args:
            repo: Repository identifier
            state: Requested state ("open" or "closed")
            pulls: Pull request dictionaries as returned by the forge
        """
        self.message(f"{state.capitalize()} pull requests for '{repo}':", style="bold")

        if not pulls:
            self.message("No pull requests found.", style="yellow")
            return

        for pr in pulls:
            line = Text()
            line.append(str(pr.get("number", "")), style="cyan")
            line.append(" ")
            line.append(_date_of(pr), style="dim")
            line.append(" ")
            line.append(pr.get("title") or "")
            self.console.print(line, soft_wrap=True)

    def display_pull(self, pr: dict[str, Any], number: str) -> None:
        """Display the header and body of a single pull request."""
        self.message(f"Date:    {_date_of(pr)}")
        self.message(f"From:    {_login_of(pr)}")
        self.message(f"Subject: {pr.get('title') or ''}")
        self.message(f"Number:  {number}")
        if body := pr.get("body"):
            self.console.print()
            self.message(body)
            self.console.print()

    def display_comments(self, comments: list[dict[str, Any]]) -> None:
        """Display issue comments, separated by a rule."""
        for comment in comments:
            self.console.print(Rule(style="dim"), width=RULE_WIDTH)
            self.message(f"Date: {_date_of(comment)}")
            self.message(f"From: {_login_of(comment)}")
            self.console.print()
            self.message(comment.get("body") or "")
            self.console.print()

    def display_patch(self, patch: bytes) -> None:
        """Write a patch byte for byte so it can be piped to `git am`."""
        click.echo(patch, file=self.stream, nl=False)
