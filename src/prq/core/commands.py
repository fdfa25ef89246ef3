"""Pull request operations invoked by the dispatcher."""

from typing import Any, Optional

from ..auth.credentials import CredentialStore
from ..ui import prompt as ui_prompt
from ..ui.display import DisplayManager
from ..utils.rich_logger import get_logger
from .errors import PrqError, UsageError
from .gateway import ApiGateway
from .git import VersionControlQuery
from .resolver import RemoteResolver

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2

PROG_NAME = "prq"
PATCH_MIMETYPE = "application/vnd.github.v3.patch"
PULL_STATES = ("open", "closed")
LOGIN_SCOPES = ["public_repo", "repo"]
LOGIN_NOTE = "prq"
LOGIN_NOTE_URL = "https://pypi.org/project/prq/"
TOKEN_SETTINGS_URL = "https://github.com/settings/applications"

USAGE = f"""\
{PROG_NAME} [<command> <args> ...]

Where command is one of these:

  help           Show this page
  list [<state>] Show all pull requests (state: open/closed)
  show <number>  Show details for the specific pull request
  patch <number> Fetch a properly formatted patch for the specific pull request
  checkout <number>
                 Check out the branch of the specific pull request

  login [<user>] [<password>] Login to GitHub and receive an access token
  comment <number> [<text>]   Create a comment on the specified pull request
  close <number>              Close the specified pull request
  open <number>               Reopen the specified pull request
  create [<title>] [<body>]   Open a pull request from the current branch
"""


def _arg(args: list[str], index: int) -> Optional[str]:
    return args[index] if len(args) > index and args[index] else None


def _number(args: list[str]) -> str:
    """Return the pull request number from the first argument."""
    number = _arg(args, 0)
    if not number:
        raise UsageError("Please specify a pull request number.")
    if not number.isdigit():
        raise UsageError(f"Pull request number must be a positive integer, not '{number}'.")
    return number


class PullRequestCommands:
    """
    One method per verb. Each takes the operation arguments and returns an
    exit status; failures raise PrqError.

    The repository is resolved on first use and reused for the rest of the
    invocation.
    """

    def __init__(
        self,
        gateway: ApiGateway,
        resolver: RemoteResolver,
        credentials: CredentialStore,
        vcs: VersionControlQuery,
        display: DisplayManager,
    ):
        self.gateway = gateway
        self.resolver = resolver
        self.credentials = credentials
        self.vcs = vcs
        self.display = display
        self._repository: Optional[str] = None

    @property
    def repository(self) -> str:
        """The upstream repository identifier, resolved once."""
        if self._repository is None:
            self._repository = self.resolver.resolve()
            logger.debug("Resolved repository", repo=self._repository)
        return self._repository

    def help(self, args: list[str]) -> int:
        self.display.message(USAGE)
        return EXIT_USAGE

    def list_pulls(self, args: list[str]) -> int:
        """Show all pull requests in the given state (default: open)."""
        state = _arg(args, 0) or "open"
        if state not in PULL_STATES:
            raise UsageError(f"Unknown pull request state '{state}'. Use one of: {', '.join(PULL_STATES)}.")
        repo = self.repository
        pulls = self.gateway.read(f"repos/{repo}/pulls?state={state}") or []
        self.display.display_pull_list(repo, state, pulls)
        return EXIT_OK

    def _fetch_pull(self, number: str) -> dict[str, Any]:
        pr = self.gateway.read(f"repos/{self.repository}/pulls/{number}")
        if not isinstance(pr, dict):
            raise PrqError(f"Unable to fetch pull request {number}.")
        return pr

    def show_pull(self, args: list[str]) -> int:
        """Show details about a pull request, including its comments."""
        number = _number(args)
        pr = self._fetch_pull(number)
        self.display.display_pull(pr, number)
        if comments_url := pr.get("comments_url"):
            self.display.display_comments(self.gateway.read(comments_url) or [])
        return EXIT_OK

    def patch_pull(self, args: list[str]) -> int:
        number = _number(args)
        patch = self.gateway.read_bytes(f"repos/{self.repository}/pulls/{number}", PATCH_MIMETYPE)
        if not patch:
            raise PrqError(f"Unable to fetch patch for pull request {number}.")
        self.display.display_patch(patch)
        return EXIT_OK

    def checkout_pull(self, args: list[str]) -> int:
        """
        Check out the head branch of a pull request as `pr/<number>`.

        The head repository is added as a remote named after its owner when
        no remote of that name exists yet.
        """
        number = _number(args)
        pr = self._fetch_pull(number)
        head = pr.get("head") or {}
        head_repo = head.get("repo")
        if not head_repo:
            raise PrqError(f"The source repository of pull request {number} no longer exists.")

        remote = head_repo["owner"]["login"]
        ref = head["ref"]
        if remote not in {r.name for r in self.vcs.remotes()}:
            self.vcs.run("remote", "add", remote, head_repo["clone_url"])
        self.vcs.run("fetch", remote)

        branch = f"pr/{number}"
        if self.vcs.branch_exists(branch):
            self.vcs.run("checkout", branch)
        else:
            self.vcs.run("checkout", "-b", branch, "--track", f"{remote}/{ref}")
        self.display.message(f"Pull request {number} checked out as branch '{branch}' ({remote}/{ref}).")
        return EXIT_OK

    def comment_pull(self, args: list[str]) -> int:
        """
        Comment on a pull request.

        Without text an editor is opened on a temporary file. The file is
        removed after a successful post or a failed editor run, and kept with
        its path reported when posting fails.
        """
        number = _number(args)
        text = _arg(args, 1)
        repo = self.repository

        comment_path = None
        if not text:
            comment_path = ui_prompt.comment_file(f"{repo}-{number}")
            try:
                text = ui_prompt.edit_file(comment_path)
            except PrqError:
                comment_path.unlink(missing_ok=True)
                raise
            if not text.strip():
                comment_path.unlink(missing_ok=True)
                raise UsageError("Your comment is empty. Command aborted.")

        try:
            comment = self.gateway.create(f"repos/{repo}/issues/{number}/comments", {"body": text})
        except PrqError as e:
            if comment_path is None:
                raise
            raise PrqError(f"{e}\nComment text saved in '{comment_path}'. Please remove it manually.") from e

        if not isinstance(comment, dict):
            raise PrqError(f"Unable to add comment on pull request {number}.")
        self.display.message(f"Comment added. You can view it online here: {comment.get('html_url')}")

        if comment_path is not None:
            try:
                comment_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Unable to remove temporary file {comment_path}: {e}")
        return EXIT_OK

    def login(self, args: list[str]) -> int:
        """
        Exchange username and password for an access token and store it.

        Values not given as arguments come from git config, then a prompt.
        """
        user = _arg(args, 0) or self.credentials.user() or ui_prompt.prompt("GitHub username")
        password = (
            _arg(args, 1)
            or self.credentials.password()
            or ui_prompt.prompt("GitHub password", hidden=True)
        )
        if not user:
            raise UsageError("Please specify a user name.")
        if not password:
            raise UsageError("Please specify a password.")

        auth = self.gateway.create(
            "authorizations",
            {"scopes": LOGIN_SCOPES, "note": LOGIN_NOTE, "note_url": LOGIN_NOTE_URL},
            user=user,
            password=password,
        )
        if not isinstance(auth, dict):
            raise PrqError("Unable to authenticate with GitHub.")
        token = auth.get("token")
        if not token:
            raise PrqError("Authentication data does not include a token.")

        self.credentials.store_token(token)
        self.display.message(
            f"Access token stored successfully. Go to {TOKEN_SETTINGS_URL} to revoke access."
        )
        return EXIT_OK

    def _set_state(self, args: list[str], state: str, action: str) -> int:
        number = _number(args)
        pr = self.gateway.update(f"repos/{self.repository}/pulls/{number}", {"state": state})
        if not isinstance(pr, dict):
            raise PrqError(f"Unable to {action} pull request {number}.")
        self.display.message(f"Pull request {number} now in state: {pr.get('state')}")
        return EXIT_OK

    def close_pull(self, args: list[str]) -> int:
        """Close a pull request. Merged pull requests cannot be closed."""
        return self._set_state(args, "closed", "close")

    def open_pull(self, args: list[str]) -> int:
        """Reopen a pull request not merged or closed by the repository owner."""
        return self._set_state(args, "open", "open")

    def create_pull(self, args: list[str]) -> int:
        """
        Open a pull request from the current branch against the upstream
        default branch. The head is qualified with the owner of the local
        forge remote so pull requests from forks work.
        """
        title = _arg(args, 0) or ui_prompt.prompt("Title")
        if not title:
            raise UsageError("Please specify a title.")
        body = _arg(args, 1) or ""

        branch = self.vcs.current_branch()
        if not branch:
            raise UsageError("Unable to determine the current branch. Check out the branch to propose first.")

        repo = self.repository
        head_owner = self.resolver.find_candidate().split("/", 1)[0]
        metadata = self.gateway.read(f"repos/{repo}") or {}
        base = metadata.get("default_branch") or "master"

        pr = self.gateway.create(
            f"repos/{repo}/pulls",
            {"title": title, "body": body, "head": f"{head_owner}:{branch}", "base": base},
        )
        if not isinstance(pr, dict):
            raise PrqError("Unable to create pull request.")
        self.display.message(f"Pull request {pr.get('number')} created: {pr.get('html_url')}")
        return EXIT_OK
