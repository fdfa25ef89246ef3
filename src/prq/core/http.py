"""HTTP transport capability and its requests-based implementation."""

from dataclasses import dataclass, field
from typing import Optional, Protocol

import requests

from .. import __version__
from .errors import TransportError

DEFAULT_TIMEOUT = 30
USER_AGENT = f"prq/{__version__}"


@dataclass
class ApiRequest:
    """A single outgoing request. Built per call, never retained."""
    method: str
    url: str
    mimetype: Optional[str] = None
    body: Optional[bytes] = None
    headers: dict[str, str] = field(default_factory=dict)
    basic_auth: Optional[tuple[str, str]] = None


@dataclass
class ApiResponse:
    """Status code and raw body of a completed exchange."""
    status_code: int
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class HttpTransport(Protocol):
    """Issues one blocking HTTP request."""

    def send(self, request: ApiRequest) -> ApiResponse:
        ...


class RequestsTransport:
    """HttpTransport backed by a requests.Session."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        """
        Initialize RequestsTransport.

        Args:
            timeout: Per-request timeout in seconds
            session: Optional pre-built session
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    def send(self, request: ApiRequest) -> ApiResponse:
        """
        Send the request and return the raw response.

        Raises:
            TransportError: If the request could not be completed
        """
        headers = dict(request.headers)
        if request.mimetype and request.body is not None:
            headers["Content-Type"] = request.mimetype

        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=headers,
                data=request.body,
                auth=request.basic_auth,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(request.method, request.url, f"{e.__class__.__name__}: {e}") from e

        return ApiResponse(status_code=response.status_code, body=response.content)

    def close(self) -> None:
        self.session.close()
