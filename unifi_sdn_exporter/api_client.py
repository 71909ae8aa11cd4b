from http import HTTPStatus
from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import urlsplit

import requests
import urllib3

from .models.controller import ControllerCredentials
from .models.site import UnifiSite
from .models.health import UnifiSiteHealth
from .models.device import UnifiDevice
from .models.metrics import ControllerStatus, Metrics
from .derivation import build_metrics
from .site_cache import SiteCache, SITE_CACHE_TTL
from .logging import get_logger, log_api_response
from .utils import decode_models
from .exceptions import (
    UnifiAPIError,
    UnifiDataError,
    UnifiInvalidEndpointError,
    UnifiMissingCredentialsError,
    UnifiRequestRejectedError,
    UnifiSiteNotFoundError,
    UnifiUnexpectedStatusError,
)

logger = get_logger(__name__)

T = TypeVar("T")

LOGIN_PATH = "/api/login"
STATUS_PATH = "/status"
SITES_PATH = "/api/self/sites"
SITE_HEALTH_PATH = "/api/s/{site}/stat/widget/health"
SITE_DEVICES_PATH = "/api/s/{site}/stat/device"


class UnifiController:
    """
    Client for the metrics relevant parts of a UniFi SDN controller's API.

    One instance owns one ``requests.Session`` (and with it the cookie jar
    holding the controller session) and may be shared between threads. The
    controller expires sessions without notice, so the client logs in lazily:
    the first request that is answered with 401 triggers a single login and
    a single retry.

    Note:
        This client interacts with the UniFi Controller's **undocumented**
        private API. Response structures may change between controller versions.
    """

    def __init__(
        self,
        credentials: ControllerCredentials,
        site_cache_ttl: float = SITE_CACHE_TTL,
    ):
        """
        Initialize the client. No request is made until data is requested.

        Args:
            credentials: Controller URL, account and TLS settings.
            site_cache_ttl: Seconds the site list is cached. Defaults to 5 minutes.

        Raises:
            UnifiMissingCredentialsError: If username or password is empty.
            UnifiInvalidEndpointError: If the URL is not an absolute http(s) URL.
        """
        if not credentials.username or not credentials.password:
            raise UnifiMissingCredentialsError(
                f"missing username or password for controller {credentials.url!r}")

        try:
            endpoint = urlsplit(credentials.url)
            endpoint.port  # raises ValueError for a malformed port
        except ValueError as e:
            raise UnifiInvalidEndpointError(
                f"invalid controller URL {credentials.url!r}: {e}") from e
        if endpoint.scheme not in ("http", "https") or not endpoint.netloc:
            raise UnifiInvalidEndpointError(
                f"invalid controller URL {credentials.url!r}: expected http(s)://host[:port]")

        logger.debug(f"Initializing UnifiController with URL: {credentials.url}")
        self.credentials = credentials
        self.base_url = f"{endpoint.scheme}://{endpoint.netloc}"
        self.timeout = credentials.timeout

        self.session = requests.Session()
        if credentials.insecure and endpoint.scheme == "https":
            logger.warning(
                f"SSL certificate verification is disabled for {self.target_name}. "
                "This is not recommended for production use."
            )
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            self.session.verify = False

        self._site_cache = SiteCache(self._fetch_sites, ttl=site_cache_ttl)

    @property
    def target_name(self) -> str:
        """Name under which scrape requests address this controller."""
        return self.credentials.target_name

    def __repr__(self) -> str:
        return f"UnifiController({self.target_name!r}, {self.base_url!r})"

    def _api_request(
        self,
        method: str,
        path: str,
        json_payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send one request and validate the response envelope.

        Args:
            method: HTTP method (e.g., 'GET', 'POST').
            path: Absolute API path, e.g. '/api/self/sites'.
            json_payload: Optional dictionary to send as JSON body.

        Returns:
            The decoded envelope ``{"meta": {...}, "data": ...}``.

        Raises:
            UnifiAPIError: If the request cannot be sent or the response read.
            UnifiUnexpectedStatusError: If the controller answers with a non-200 status.
            UnifiRequestRejectedError: If ``meta.rc`` is not "ok".
            UnifiDataError: If the body is not an envelope or lacks ``data``.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug(f"{method} {url}")

        headers = {"Accept": "application/json"}
        request_kwargs = {"headers": headers, "timeout": self.timeout}
        if json_payload is not None:
            headers["Content-Type"] = "application/json"
            request_kwargs["json"] = json_payload

        try:
            response = self.session.request(method, url, **request_kwargs)
        except requests.exceptions.RequestException as e:
            error_msg = f"API {method} request to {url} failed: {e}"
            logger.error(error_msg)
            raise UnifiAPIError(error_msg) from e

        if response.status_code != HTTPStatus.OK:
            raise UnifiUnexpectedStatusError(
                method, url, response.status_code, response.content)

        try:
            envelope = response.json()
        except ValueError as e:
            error_msg = f"Failed to parse API response from {url}: {e}"
            logger.error(error_msg)
            raise UnifiDataError(error_msg) from e

        log_api_response(logger, url, envelope, response.status_code)

        if not isinstance(envelope, dict) or not isinstance(envelope.get("meta"), dict):
            error_msg = f"Unexpected API response format for {url}"
            logger.error(error_msg)
            raise UnifiDataError(error_msg)

        meta = envelope["meta"]
        if meta.get("rc") != "ok":
            raise UnifiRequestRejectedError(str(meta.get("msg") or ""))
        if envelope.get("data") is None:
            raise UnifiDataError(f"missing response payload from {url}")

        return envelope

    def login(self) -> None:
        """
        Log in with the configured credentials.

        Any cookie left from a previous session is dropped first. On success
        the session cookie set by the controller is kept in ``self.session``
        and used by all later requests, from every thread.

        Raises:
            UnifiControllerError: Any error of the login request.
        """
        self.session.cookies.clear()
        logger.debug(f"Logging in to {self.base_url} as {self.credentials.username}")
        self._api_request(
            "POST",
            LOGIN_PATH,
            {
                "username": self.credentials.username,
                "password": self.credentials.password,
                "remember": True,
                "strict": False,
            },
        )
        logger.info(f"Logged in to UniFi controller {self.target_name}")

    def _get_envelope(self, path: str) -> Dict[str, Any]:
        """
        GET ``path``, logging in and retrying once if the session was rejected.

        Raises:
            UnifiControllerError: The first error that is not a session expiry,
                                  the login error, or the error of the retry.
        """
        retried = False
        while True:
            try:
                return self._api_request("GET", path)
            except UnifiUnexpectedStatusError as e:
                if not e.unauthorized or retried:
                    logger.debug(f"Request failed: {e}")
                    raise
                logger.info(f"Unauthorized for {e.url}, logging in")
            self.login()
            retried = True

    def get(self, path: str, model: Optional[Type[T]] = None) -> Any:
        """
        Fetch the ``data`` payload of a GET endpoint with automatic session renewal.

        Args:
            path: Absolute API path.
            model: Optional dataclass; if given, every element of the payload
                   is mapped to an instance of it.

        Returns:
            The raw payload, or a list of ``model`` instances.

        Raises:
            UnifiAPIError: If the request fails.
            UnifiDataError: If the payload cannot be decoded.
        """
        data = self._get_envelope(path)["data"]
        if model is None:
            return data
        return decode_models(data, model, path, id_field="mac")

    def get_controller_status(self) -> ControllerStatus:
        """
        Fetch ``/status``, which reports the controller version in its ``meta`` block.

        Returns:
            ControllerStatus with the server version.
        """
        meta = self._get_envelope(STATUS_PATH)["meta"]
        return ControllerStatus(
            version=str(meta.get("server_version") or ""),
            up=bool(meta.get("up", True)),
        )

    def _fetch_sites(self) -> List[UnifiSite]:
        logger.info(f"Fetching sites from {self.target_name}")
        return decode_models(self.get(SITES_PATH), UnifiSite, SITES_PATH, id_field="name")

    def sites(self) -> List[UnifiSite]:
        """
        List the controller's sites, served from a cache refreshed every 5 minutes.

        Returns:
            Sites in the order reported by the controller.
        """
        return list(self._site_cache.get())

    def resolve_site(self, ident: str) -> UnifiSite:
        """
        Find a site by short code or, failing that, by display name.

        Args:
            ident: Site short code (e.g. "default") or display name.

        Raises:
            UnifiSiteNotFoundError: If no site matches.
        """
        sites = self._site_cache.get()
        for site in sites:
            if site.name == ident:
                return site
        for site in sites:
            if site.desc == ident:
                return site
        raise UnifiSiteNotFoundError(ident)

    def metrics(self, site_ident: str) -> Metrics:
        """
        Collect one metrics snapshot for a site.

        Issues the status, health and device requests in sequence; the first
        failure aborts the snapshot.

        Args:
            site_ident: Site short code or display name.

        Returns:
            The complete snapshot.

        Raises:
            UnifiSiteNotFoundError: If the site does not exist.
            UnifiAPIError: If a request fails.
            UnifiDataError: If a response is malformed, including a health
                            response that does not have exactly one entry
                            and nested fields of the wrong type.
        """
        site = self.resolve_site(site_ident)

        logger.debug("Fetching controller status")
        status = self.get_controller_status()

        logger.debug(f"Fetching health info for site {site.name}")
        health_path = SITE_HEALTH_PATH.format(site=site.name)
        health = self.get(health_path, UnifiSiteHealth)
        if len(health) != 1:
            error_msg = f"Unexpected result length {len(health)} from {health_path}"
            logger.error(error_msg)
            raise UnifiDataError(error_msg)

        logger.debug(f"Fetching device statistics for site {site.name}")
        devices = self.get(SITE_DEVICES_PATH.format(site=site.name), UnifiDevice)

        try:
            return build_metrics(status.version, health[0], devices)
        except (AttributeError, TypeError, ValueError, OverflowError) as e:
            # nested objects and numbers of unexpected type
            error_msg = f"Failed to decode metrics of site {site.name}: {e}"
            logger.error(error_msg)
            raise UnifiDataError(error_msg) from e
