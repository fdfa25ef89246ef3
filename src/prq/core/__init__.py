"""Core functionality for prq."""

from .errors import PrqError
from .http import RequestsTransport
from .git import GitCommand
from .gateway import ApiGateway
from .resolver import RemoteResolver
from .commands import PullRequestCommands
from .dispatcher import Dispatcher, Verb

__all__ = [
    "ApiGateway",
    "Dispatcher",
    "GitCommand",
    "PrqError",
    "PullRequestCommands",
    "RemoteResolver",
    "RequestsTransport",
    "Verb",
]
