"""Exception hierarchy for prq.

Every failure is terminal for the current invocation. Library code raises one
of these; only the CLI entry point turns them into a message and exit status.
"""

from typing import Optional


class PrqError(Exception):
    """Base class for all prq errors."""


class UsageError(PrqError):
    """A required command argument is missing or malformed."""


class EnvironmentSetupError(PrqError):
    """The local environment cannot support the requested operation."""


class RemoteNotFoundError(EnvironmentSetupError):
    """No forge repository could be determined for the current checkout."""


class GitCommandError(PrqError):
    """A git invocation whose result was required exited non-zero."""

    def __init__(self, args: list[str], returncode: int, output: str = ""):
        self.command = args
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"git {' '.join(args)} returned message '{output.strip()}' "
            f"and code {returncode}."
        )


class TransportError(PrqError):
    """The HTTP exchange itself could not be completed."""

    def __init__(self, method: str, url: str, reason: Optional[str] = None):
        self.method = method
        self.url = url
        self.reason = reason
        super().__init__(f"{method} request to {url} failed: {reason}")


class ApiError(PrqError):
    """The forge answered with an HTTP status of 400 or above."""

    def __init__(self, url: str, status: int, body: str, message: Optional[str] = None):
        self.url = url
        self.status = status
        self.body = body
        super().__init__(message or f"Request to URL {url} failed with code {status}:\n{body}")


class ValidationFailedError(ApiError):
    """HTTP 422 on an update.

    The forge's own body for this case is an uninformative "Validation Failed",
    so the message carries the most likely cause as a hint.
    """

    def __init__(self, url: str, status: int, body: str):
        message = (
            "If you get 'Validation Failed' error without any reason, most likely "
            "the pull request has already been merged or closed by the repo owner.\n"
            f"URL: {url}\n"
            f"Code: {status}\n"
            f"{body}"
        )
        super().__init__(url, status, body, message=message)


class AuthRequiredError(PrqError):
    """A mutating request was attempted without any credentials."""

    def __init__(self, message: str = "You must login before you can modify information."):
        super().__init__(message)
