from http import HTTPStatus
from typing import Union


class UnifiControllerError(Exception):
    """Base exception for UnifiController errors."""

    pass


class UnifiInvalidEndpointError(UnifiControllerError):
    """Raised when the configured controller URL cannot be used."""

    pass


class UnifiMissingCredentialsError(UnifiControllerError):
    """Raised when a controller is configured without username or password."""

    pass


class UnifiAPIError(UnifiControllerError):
    """Raised when an API call to the UniFi Controller fails."""

    pass


class UnifiUnexpectedStatusError(UnifiAPIError):
    """
    Raised when the controller answers with a non-200 HTTP status.

    Attributes:
        method: HTTP method of the failed request.
        url: Full URL of the failed request.
        status: HTTP status code returned by the controller.
        body: Raw response body, kept for diagnosis.
    """

    def __init__(self, method: str, url: str, status: int, body: Union[str, bytes] = b""):
        self.method = method
        self.url = url
        self.status = status
        self.body = body
        super().__init__(f"unexpected status {status} for {method} {url}")

    @property
    def unauthorized(self) -> bool:
        """Whether the controller rejected the session (HTTP 401)."""
        return self.status == HTTPStatus.UNAUTHORIZED


class UnifiRequestRejectedError(UnifiAPIError):
    """Raised when the response envelope reports ``meta.rc`` other than ``ok``."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"request failed: {message}")


class UnifiDataError(UnifiControllerError):
    """Raised when there is an error parsing data from the UniFi Controller."""

    pass


class UnifiSiteNotFoundError(UnifiControllerError):
    """Raised when no site matches the requested identifier."""

    def __init__(self, ident: str):
        self.ident = ident
        super().__init__(f"site {ident!r} not found")


class UnifiModelError(UnifiControllerError):
    """Raised when there is an error loading or processing device models."""

    pass


class UnifiConfigError(UnifiControllerError):
    """Raised when the exporter configuration cannot be loaded."""

    pass
