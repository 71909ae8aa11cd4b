"""
Loading of the exporter's TOML configuration.

Example::

    [[unifi-controller]]
    alias    = "main"
    url      = "https://unifi.example.com:8443"
    username = "exporter"
    password = "secret"
    insecure = true
"""

import tomllib
from typing import Any, Dict, List, Optional

from .api_client import UnifiController
from .models.controller import ControllerCredentials
from .logging import get_logger
from .exceptions import UnifiConfigError, UnifiControllerError

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "./config.toml"
CONTROLLER_TABLE = "unifi-controller"


class Config:
    """
    The configured controllers, keyed by target name.

    Attributes:
        controllers: Credentials in configuration order.
    """

    def __init__(self, controllers: List[ControllerCredentials]):
        self.controllers = controllers
        self._clients: Dict[str, UnifiController] = {}

        for i, credentials in enumerate(controllers):
            try:
                client = UnifiController(credentials)
            except UnifiControllerError as e:
                raise UnifiConfigError(f"invalid controller #{i} ({credentials!r}): {e}") from e

            target = client.target_name
            if target in self._clients:
                raise UnifiConfigError(f"invalid controller #{i}: duplicate target name {target!r}")
            self._clients[target] = client

    @property
    def clients(self) -> List[UnifiController]:
        return list(self._clients.values())

    def get_client(self, target: str) -> Optional[UnifiController]:
        """Client for a target name (alias or URL host), None if not configured."""
        return self._clients.get(target)


def _parse_controller(i: int, entry: Any) -> ControllerCredentials:
    if not isinstance(entry, dict):
        raise UnifiConfigError(f"invalid controller #{i}: expected a table")

    unknown = set(entry) - {"alias", "url", "username", "password", "insecure", "timeout"}
    if unknown:
        raise UnifiConfigError(f"invalid controller #{i}: unknown keys {sorted(unknown)}")

    try:
        return ControllerCredentials(
            alias=str(entry.get("alias", "")),
            url=str(entry.get("url", "")),
            username=str(entry.get("username", "")),
            password=str(entry.get("password", "")),
            insecure=bool(entry.get("insecure", False)),
            timeout=float(entry.get("timeout", 10)),
        )
    except (TypeError, ValueError) as e:
        raise UnifiConfigError(f"invalid controller #{i}: {e}") from e


def load_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """
    Load the configuration file and create a client per controller.

    Args:
        path: Path of the TOML file.

    Returns:
        Config holding one UnifiController per ``[[unifi-controller]]`` table.

    Raises:
        UnifiConfigError: If the file cannot be read or parsed, or a controller
                          entry is invalid.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise UnifiConfigError(f"loading config file {path!r} failed: {e}") from e

    entries = data.get(CONTROLLER_TABLE, [])
    if not isinstance(entries, list):
        raise UnifiConfigError(f"loading config file {path!r} failed: "
                               f"{CONTROLLER_TABLE!r} must be an array of tables")

    config = Config([_parse_controller(i, entry) for i, entry in enumerate(entries)])
    logger.info(f"Loaded {len(config.controllers)} controllers from {path}")
    return config
