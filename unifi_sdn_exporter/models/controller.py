"""
Models describing a configured UniFi controller.
"""

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlsplit


@dataclass(frozen=True)
class ControllerCredentials:
    """
    Connection settings for one UniFi SDN controller.

    Attributes:
        alias: Name used to address the controller in scrape requests.
        url: Base URL of the controller, e.g. ``https://unifi.example.com:8443``.
        username: Local controller account used for the API session.
        password: Password of that account.
        insecure: Skip TLS certificate validation for this controller only.
        timeout: Per-request timeout in seconds.
    """
    url: str
    username: str
    password: str = field(repr=False)
    alias: str = ""
    insecure: bool = False
    timeout: Optional[float] = 10

    @property
    def target_name(self) -> str:
        """The alias, or the URL's host name when no alias is configured."""
        if self.alias:
            return self.alias
        return urlsplit(self.url).hostname or ""
