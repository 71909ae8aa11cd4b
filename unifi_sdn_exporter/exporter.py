"""
WSGI front end of the exporter.

``/metrics?target=<controller>&site=<site>`` serves one site of one
controller in the Prometheus text format; ``/`` lists all configured
controllers and their sites.
"""

import html
from string import Template
from typing import Callable, Dict, Iterable, List, Tuple
from urllib.parse import parse_qs, urlencode
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from prometheus_client.exposition import ThreadingWSGIServer

from .collector import UnifiCollector
from .config import Config
from .models.site import UnifiSite
from .exceptions import UnifiControllerError, UnifiSiteNotFoundError
from .logging import get_logger

logger = get_logger(__name__)

DEFAULT_LISTEN_ADDRESS = ":9810"

TEXT_PLAIN = "text/plain; charset=utf-8"

INDEX_TEMPLATE = Template("""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>UniFi SDN Exporter</title>
</head>
<body>
<h1>UniFi SDN Exporter</h1>
$controllers
</body>
</html>
""")

CONTROLLER_TEMPLATE = Template("""<h2>$target</h2>
<ul>
$sites
</ul>
""")

SITE_TEMPLATE = Template("""<li><a href="/metrics?$query">$desc</a> ($name)</li>""")

StartResponse = Callable[[str, List[Tuple[str, str]]], None]


def _response(
    start_response: StartResponse, status: str, content_type: str, body: bytes
) -> Iterable[bytes]:
    start_response(status, [("Content-Type", content_type), ("Content-Length", str(len(body)))])
    return [body]


def _error(start_response: StartResponse, status: str, message: str) -> Iterable[bytes]:
    return _response(start_response, status, TEXT_PLAIN, f"{message}\n".encode("utf-8"))


def render_index(sites_by_target: Dict[str, List[UnifiSite]]) -> str:
    """Render the HTML index page, sites sorted by display name."""
    sections = []
    for target, sites in sites_by_target.items():
        items = []
        for site in sorted(sites, key=lambda s: s.desc or ""):
            items.append(SITE_TEMPLATE.substitute(
                query=html.escape(urlencode({"target": target, "site": site.name})),
                desc=html.escape(site.desc or site.name),
                name=html.escape(site.name),
            ))
        sections.append(CONTROLLER_TEMPLATE.substitute(
            target=html.escape(target), sites="\n".join(items)))
    return INDEX_TEMPLATE.substitute(controllers="\n".join(sections))


def make_app(config: Config):
    """
    Build the WSGI application serving the given configuration.

    Args:
        config: Loaded configuration with one client per controller.

    Returns:
        A WSGI callable.
    """

    def metrics(environ, start_response):
        params = parse_qs(environ.get("QUERY_STRING", ""))
        target = params.get("target", [""])[0]
        if not target:
            return _error(start_response, "400 Bad Request", "target parameter missing")
        site = params.get("site", [""])[0]
        if not site:
            return _error(start_response, "400 Bad Request", "site parameter missing")

        client = config.get_client(target)
        if client is None:
            return _error(start_response, "404 Not Found", "configuration not found")

        failure = None
        try:
            client.resolve_site(site)
        except UnifiSiteNotFoundError as e:
            return _error(start_response, "404 Not Found", str(e))
        except UnifiControllerError as e:
            # reported as controller_up 0 by the collector
            logger.warning(f"Resolving site {site!r} on {target} failed: {e}")
            failure = e

        registry = CollectorRegistry()
        registry.register(UnifiCollector(client, site, failure))
        return _response(start_response, "200 OK", CONTENT_TYPE_LATEST, generate_latest(registry))

    def index(environ, start_response):
        sites_by_target = {}
        for client in config.clients:
            try:
                sites_by_target[client.target_name] = client.sites()
            except UnifiControllerError as e:
                logger.error(f"Fetching sites for controller {client.target_name} failed: {e}")
                return _error(
                    start_response,
                    "500 Internal Server Error",
                    f"error fetching sites for controller {client.target_name}: {e}",
                )
        body = render_index(sites_by_target).encode("utf-8")
        return _response(start_response, "200 OK", "text/html; charset=utf-8", body)

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "/")
        if path == "/metrics":
            return metrics(environ, start_response)
        if path == "/" and not environ.get("QUERY_STRING"):
            return index(environ, start_response)
        return _error(start_response, "404 Not Found", "404 page not found")

    return app


class _LoggingRequestHandler(WSGIRequestHandler):
    """Send access logs to the package logger instead of stderr."""

    def log_message(self, format, *args):
        logger.debug(f"{self.address_string()} {format % args}")


def parse_listen_address(listen_address: str) -> Tuple[str, int]:
    """
    Split ``host:port``; an empty host listens on all interfaces.

    Raises:
        ValueError: If the port is missing or not a number.
    """
    host, sep, port = listen_address.rpartition(":")
    if not sep:
        raise ValueError(f"invalid listen address {listen_address!r}: missing port")
    return host.strip("[]"), int(port)


def serve(config: Config, listen_address: str = DEFAULT_LISTEN_ADDRESS) -> None:
    """Serve the exporter until interrupted."""
    host, port = parse_listen_address(listen_address)
    httpd = make_server(
        host, port, make_app(config),
        server_class=ThreadingWSGIServer,
        handler_class=_LoggingRequestHandler,
    )
    logger.info(f"Starting exporter on http://{listen_address}/")
    try:
        httpd.serve_forever()
    finally:
        httpd.server_close()
