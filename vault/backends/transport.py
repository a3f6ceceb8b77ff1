"""HTTP transport shared by the Appwrite identity and storage backends."""

import uuid
from typing import Callable, Optional

import httpx

from common.exceptions import (
    AlreadyExistsError,
    InvalidCredentialsError,
    NotFoundError,
    RejectedError,
    ServiceUnavailableError,
    UnauthenticatedError,
    VaultError,
)
from common.logging_config import get_logger

logger = get_logger(__name__)

FALLBACK_COOKIES_HEADER = "X-Fallback-Cookies"

REJECTION_STATUSES = (400, 413, 415, 416)


def error_from_response(response: httpx.Response) -> VaultError:
    """
    Map an Appwrite error response to the vault exception taxonomy.

    The service's own message text is always kept.

    Args:
        response: HTTP response with a 4xx/5xx status

    Returns:
        Exception instance to raise
    """
    status = response.status_code
    try:
        data = response.json()
        message = data.get("message") or response.reason_phrase
        error_type = data.get("type") or ""
    except ValueError:
        message = response.text or response.reason_phrase
        error_type = ""

    if status == 401 and error_type == "user_invalid_credentials":
        return InvalidCredentialsError(message, status, error_type)
    if status in (401, 403):
        return UnauthenticatedError(message, status, error_type)
    if status == 404:
        return NotFoundError(message, status, error_type)
    if status == 409:
        return AlreadyExistsError(message, status, error_type)
    if status in REJECTION_STATUSES and (status != 400 or error_type.startswith("storage_")):
        return RejectedError(message, status, error_type)
    if status >= 500:
        return ServiceUnavailableError(message, status, error_type)
    return VaultError(message, status, error_type)


def json_body(response: httpx.Response) -> dict:
    """
    Decode the JSON object of a successful response.

    Raises:
        ServiceUnavailableError: The body is not a JSON object (e.g. a proxy error page)
    """
    try:
        data = response.json()
    except ValueError as e:
        snippet = response.text.strip()[:200] or response.reason_phrase
        raise ServiceUnavailableError(f"Unexpected response from server: {snippet}", response.status_code) from e
    if not isinstance(data, dict):
        raise ServiceUnavailableError("Unexpected response from server: expected a JSON object", response.status_code)
    return data


def require(data: dict, key: str):
    """Read a mandatory field of a decoded response body."""
    try:
        return data[key]
    except KeyError:
        raise ServiceUnavailableError(f"Unexpected response from server: missing '{key}'") from None


class AppwriteTransport:
    """
    Async HTTP client for one Appwrite project.

    Keeps the session cookie in the client's cookie jar and mirrors it in
    the X-Fallback-Cookies header so it survives process restarts.
    """

    def __init__(
        self,
        endpoint: str,
        project_id: str,
        timeout: float = 30.0,
        fallback_cookies: Optional[str] = None,
        on_cookies_changed: Optional[Callable[[Optional[str]], None]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.project_id = project_id
        self.fallback_cookies = fallback_cookies
        self.on_cookies_changed = on_cookies_changed
        self.client = httpx.AsyncClient(
            base_url=self.endpoint,
            timeout=timeout,
            headers={
                "X-Appwrite-Project": project_id,
                "X-Appwrite-Response-Format": "1.5.0",
            },
            transport=transport,
        )
        logger.info(f"Initialized Appwrite transport [endpoint={self.endpoint}, project={project_id}]")

    def url(self, path: str) -> str:
        return f"{self.endpoint}{path}"

    def _set_fallback_cookies(self, value: Optional[str]) -> None:
        if value == self.fallback_cookies:
            return
        self.fallback_cookies = value
        if self.on_cookies_changed is not None:
            self.on_cookies_changed(value)

    def forget_session(self) -> None:
        """Drop every trace of the session cookie."""
        self.client.cookies.clear()
        self._set_fallback_cookies(None)

    def _prepare_headers(self, kwargs: dict) -> dict:
        headers = dict(kwargs.pop("headers", None) or {})
        headers["X-Request-ID"] = str(uuid.uuid4())
        if self.fallback_cookies:
            headers[FALLBACK_COOKIES_HEADER] = self.fallback_cookies
        return headers

    def _translate_transport_error(self, method: str, path: str, exc: httpx.TransportError) -> ServiceUnavailableError:
        if isinstance(exc, httpx.ConnectError):
            logger.error(f"Network error: {method} {path} error={exc}")
            return ServiceUnavailableError(f"Cannot connect to {self.endpoint}. Is it reachable?")
        if isinstance(exc, httpx.TimeoutException):
            logger.error(f"Timeout: {method} {path}")
            return ServiceUnavailableError("Request timed out. Server may be overloaded.")
        logger.error(f"Transport error: {method} {path} error={exc}")
        return ServiceUnavailableError(f"Network error: {exc}")

    def _check_response(self, method: str, path: str, response: httpx.Response) -> None:
        request_id = response.request.headers.get("X-Request-ID")
        logger.debug(
            f"Response received: {method} {path} status={response.status_code} [request_id={request_id}]"
        )

        cookies = response.headers.get(FALLBACK_COOKIES_HEADER)
        if cookies:
            self._set_fallback_cookies(cookies)

        if response.status_code >= 400:
            error = error_from_response(response)
            logger.warning(
                f"Request failed: {method} {path} status={response.status_code} "
                f"type={error.error_type or 'unknown'} [request_id={request_id}]"
            )
            raise error

    async def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        Send one request and raise the mapped exception on error statuses.

        Args:
            method: HTTP method
            path: API path below the endpoint
            **kwargs: Passed through to httpx

        Returns:
            Successful HTTP response

        Raises:
            ServiceUnavailableError: Connection failure or timeout
            VaultError: Error status, mapped by error_from_response
        """
        headers = self._prepare_headers(kwargs)
        logger.debug(f"Making request: {method} {path} [request_id={headers['X-Request-ID']}]")
        try:
            response = await self.client.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as e:
            raise self._translate_transport_error(method, path, e) from e

        self._check_response(method, path, response)
        return response

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
        logger.debug(f"Closed Appwrite transport [endpoint={self.endpoint}]")
