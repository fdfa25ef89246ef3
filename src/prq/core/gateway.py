"""Authenticated JSON gateway to the forge API."""

import json
from typing import Any, Optional

from ..auth.credentials import (
    BasicCredentials,
    Credentials,
    CredentialStore,
    NoCredentials,
    TokenCredentials,
    select_credentials,
)
from ..utils.rich_logger import get_logger
from .errors import ApiError, AuthRequiredError, ValidationFailedError
from .http import ApiRequest, ApiResponse, HttpTransport

logger = get_logger(__name__)

GITHUB_API_ORIGIN = "https://api.github.com/"
JSON_MIMETYPE = "application/json"


class ApiGateway:
    """
    Turns a resource path and optional payload into an authenticated,
    classified HTTP exchange.

    Paths may be relative (`repos/acme/widgets/pulls`) or absolute URLs taken
    from a previous response (`comments_url`). Every request goes to the API
    origin, so credentials apply to all of them.
    """

    def __init__(
        self,
        transport: HttpTransport,
        credential_store: CredentialStore,
        api_origin: str = GITHUB_API_ORIGIN,
        debug: bool = False,
    ):
        """
        Initialize ApiGateway.

        Args:
            transport: HTTP transport used for every exchange
            credential_store: Source of the stored token
            api_origin: Fixed API origin, with trailing slash
            debug: Log every request before it is sent
        """
        self.transport = transport
        self.credentials = credential_store
        self.api_origin = api_origin if api_origin.endswith("/") else api_origin + "/"
        self.debug = debug

    def build_url(self, path: str) -> str:
        """
        Build an absolute URL.

        Args:
            path: Relative resource path or absolute URL under the API origin

        Returns:
            The path unchanged if it already starts with the API origin,
            otherwise the origin followed by the path without leading slashes
        """
        if path.startswith(self.api_origin):
            return path
        return self.api_origin + path.lstrip("/")

    def read(self, path: str) -> Any:
        """
        GET a resource and decode its JSON body.

        Uses the stored token when there is one, anonymous access otherwise.
        """
        url = self.build_url(path)
        credentials = select_credentials(self.credentials.token())
        response = self._send("GET", url, credentials, headers={"Accept": JSON_MIMETYPE})
        self._raise_for_status("Fetching", url, response)
        return self._decode(url, response)

    def read_bytes(self, path: str, mimetype: str) -> bytes:
        """GET a resource in the given media type and return the body undecoded."""
        url = self.build_url(path)
        credentials = select_credentials(self.credentials.token())
        response = self._send("GET", url, credentials, headers={"Accept": mimetype})
        self._raise_for_status("Fetching", url, response)
        return response.body

    def create(
        self,
        path: str,
        payload: Any,
        user: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Any:
        """
        POST a JSON payload.

        Args:
            path: Resource path or URL
            payload: JSON-serializable payload
            user: Explicit username, only used together with password
            password: Explicit password

        Raises:
            AuthRequiredError: If neither a stored token nor user/password is available
        """
        url = self.build_url(path)
        credentials = select_credentials(self.credentials.token(), user, password)
        if isinstance(credentials, NoCredentials):
            raise AuthRequiredError()
        response = self._send("POST", url, credentials, body=self._encode(payload))
        self._raise_for_status("Posting to", url, response)
        return self._decode(url, response)

    def update(self, path: str, payload: Any) -> Any:
        """
        PATCH a JSON payload. Always requires a stored token.

        Raises:
            AuthRequiredError: If no token is stored; nothing is sent
            ValidationFailedError: On HTTP 422
        """
        url = self.build_url(path)
        token = self.credentials.token()
        if not token:
            raise AuthRequiredError()
        response = self._send("PATCH", url, TokenCredentials(token), body=self._encode(payload))
        if response.status_code == 422:
            raise ValidationFailedError(url, response.status_code, response.text)
        self._raise_for_status("Patching", url, response)
        return self._decode(url, response)

    def _send(
        self,
        method: str,
        url: str,
        credentials: Credentials,
        body: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> ApiResponse:
        request = ApiRequest(
            method=method,
            url=url,
            mimetype=JSON_MIMETYPE if body is not None else None,
            body=body,
            headers=dict(headers or {}),
        )
        if isinstance(credentials, TokenCredentials):
            request.headers["Authorization"] = f"token {credentials.token}"
        elif isinstance(credentials, BasicCredentials):
            request.basic_auth = (credentials.user, credentials.password)

        if self.debug:
            logger.info("API request",
                        method=method,
                        url=url,
                        auth=type(credentials).__name__)

        response = self.transport.send(request)
        logger.debug("API response", url=url, status=response.status_code)
        return response

    @staticmethod
    def _raise_for_status(action: str, url: str, response: ApiResponse) -> None:
        if response.status_code >= 400:
            raise ApiError(
                url,
                response.status_code,
                response.text,
                message=f"{action} URL {url} failed with code {response.status_code}:\n{response.text}",
            )

    @staticmethod
    def _encode(payload: Any) -> bytes:
        return json.dumps(payload).encode("utf-8")

    @staticmethod
    def _decode(url: str, response: ApiResponse) -> Any:
        if not response.body.strip():
            return None
        try:
            return json.loads(response.body)
        except ValueError as e:
            raise ApiError(
                url,
                response.status_code,
                response.text,
                message=f"Unable to decode JSON response from {url}: {e}",
            ) from e
