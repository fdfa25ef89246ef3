"""Map an argument vector to exactly one pull request operation."""

from enum import Enum
from typing import Callable

from ..utils.rich_logger import get_logger
from .commands import PullRequestCommands

logger = get_logger(__name__)


class Verb(str, Enum):
    """Supported verbs. Matching is exact: no aliases, prefixes or case folding."""
    LIST = "list"
    SHOW = "show"
    PATCH = "patch"
    CHECKOUT = "checkout"
    COMMENT = "comment"
    LOGIN = "login"
    CLOSE = "close"
    OPEN = "open"
    HELP = "help"
    CREATE = "create"


VERBS = {verb.value: verb for verb in Verb}


def parse(argv: list[str]) -> tuple[Verb, list[str]]:
    """
    Split argv into a verb and its arguments.

    An empty argv means `list`. An unknown verb means `help` with the full
    original argv, verb included.
    """
    if not argv:
        return Verb.LIST, []
    verb = VERBS.get(argv[0])
    if verb is None:
        return Verb.HELP, list(argv)
    return verb, list(argv[1:])


class Dispatcher:
    """Invokes the handler selected by the verb; its status is the process outcome."""

    def __init__(self, commands: PullRequestCommands):
        self.handlers: dict[Verb, Callable[[list[str]], int]] = {
            Verb.LIST: commands.list_pulls,
            Verb.SHOW: commands.show_pull,
            Verb.PATCH: commands.patch_pull,
            Verb.CHECKOUT: commands.checkout_pull,
            Verb.COMMENT: commands.comment_pull,
            Verb.LOGIN: commands.login,
            Verb.CLOSE: commands.close_pull,
            Verb.OPEN: commands.open_pull,
            Verb.HELP: commands.help,
            Verb.CREATE: commands.create_pull,
        }

    def dispatch(self, argv: list[str]) -> int:
        verb, args = parse(argv)
        logger.debug("Dispatching", verb=verb.value, args=len(args))
        return self.handlers[verb](args)
