"""Credentials and their persistence in git configuration."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from ..utils.rich_logger import get_logger

if TYPE_CHECKING:
    from ..core.git import VersionControlQuery

logger = get_logger(__name__)

TOKEN_KEY = "github.prq-token"
USER_KEY = "github.user"
PASSWORD_KEY = "github.password"


@dataclass(frozen=True)
class NoCredentials:
    """Anonymous access."""


@dataclass(frozen=True)
class TokenCredentials:
    """Bearer token sent as `Authorization: token <t>`."""
    token: str

    def __repr__(self) -> str:
        return "TokenCredentials(token='***')"


@dataclass(frozen=True)
class BasicCredentials:
    """Username and password sent as HTTP basic auth."""
    user: str
    password: str

    def __repr__(self) -> str:
        return f"BasicCredentials(user={self.user!r}, password='***')"


Credentials = Union[NoCredentials, TokenCredentials, BasicCredentials]


def select_credentials(
    token: Optional[str],
    user: Optional[str] = None,
    password: Optional[str] = None,
) -> Credentials:
    """
    Pick the one credential representation used for a request.

    An explicit user/password pair wins over the stored token; the token
    wins over anonymous access.
    """
    if user and password:
        return BasicCredentials(user, password)
    if token:
        return TokenCredentials(token)
    return NoCredentials()


class CredentialStore:
    """
    Reads and writes prq credentials in git configuration.

    Values are read fresh on every call; nothing is cached.
    """

    def __init__(self, vcs: "VersionControlQuery"):
        self.vcs = vcs

    def token(self) -> Optional[str]:
        return self.vcs.config_get(TOKEN_KEY)

    def user(self) -> Optional[str]:
        return self.vcs.config_get(USER_KEY)

    def password(self) -> Optional[str]:
        return self.vcs.config_get(PASSWORD_KEY)

    def store_token(self, token: str) -> None:
        """Persist the token in the user's global git configuration."""
        self.vcs.config_set_global(TOKEN_KEY, token)
        logger.info("Stored access token", key=TOKEN_KEY)
