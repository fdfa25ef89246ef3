#!/usr/bin/env python3
"""Command-line interface for prq."""

import sys
from typing import Optional

import click
from rich.console import Console
from rich.text import Text

from . import __version__
from .auth.credentials import CredentialStore
from .core.commands import PullRequestCommands
from .core.dispatcher import Dispatcher
from .core.errors import PrqError
from .core.gateway import ApiGateway
from .core.git import GitCommand
from .core.http import RequestsTransport
from .core.resolver import RemoteResolver
from .ui.display import DisplayManager
from .utils.config import ConfigManager
from .utils.rich_logger import get_logger

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_dispatcher(config: ConfigManager, transport: RequestsTransport) -> Dispatcher:
    """Wire the gateway, resolver and commands from configuration."""
    debug = config.debug
    vcs = GitCommand(debug=debug)
    credentials = CredentialStore(vcs)
    gateway = ApiGateway(
        transport,
        credentials,
        api_origin=config.get("github.api_url"),
        debug=debug,
    )
    resolver = RemoteResolver(
        gateway,
        vcs,
        host=config.get("github.host"),
        override=config.repo_override,
        debug=debug,
    )
    commands = PullRequestCommands(gateway, resolver, credentials, vcs, DisplayManager(console))
    return Dispatcher(commands)


@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
        "help_option_names": [],
    }
)
@click.argument("argv", nargs=-1, type=click.UNPROCESSED)
@click.option("--debug", is_flag=True, help="Log every API request and git command (also PRQ_DEBUG=1)")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to config file")
@click.version_option(__version__, prog_name="prq")
def main(argv: tuple[str, ...], debug: bool, config_path: Optional[str]) -> None:
    """
    Query and update GitHub pull requests for the repository in the
    current directory.

    Examples:
        prq                    # list open pull requests
        prq list closed
        prq show 7             # also includes comments
        prq patch 7 | git am
        prq login              # get an access token for the commands below
        prq comment 7 'This is good stuff!'
        prq close 7
        GITHUB_REPO=owner/repo prq list
    """
    config = ConfigManager(config_path=config_path)
    if debug:
        config.set("debug", True)
    config.setup_logging()

    transport = RequestsTransport(timeout=config.get("github.timeout", 30))
    try:
        status = build_dispatcher(config, transport).dispatch(list(argv))
    except KeyboardInterrupt:
        err_console.print(Text("\nInterrupted by user", style="yellow"))
        sys.exit(EXIT_INTERRUPTED)
    except PrqError as e:
        logger.debug("Command failed", error_type=e.__class__.__name__)
        err_console.print(Text(f"Error: {e}", style="red"))
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        logger.debug("Unexpected failure", error_type=e.__class__.__name__)
        err_console.print(Text(f"Error: {e}", style="red"))
        if config.debug:
            err_console.print_exception()
        sys.exit(EXIT_FAILURE)
    finally:
        transport.close()

    sys.exit(status)


if __name__ == "__main__":
    main()
