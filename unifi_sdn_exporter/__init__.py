"""
Prometheus exporter for UniFi SDN controllers.

This package provides a client for the metrics relevant, read-only parts of
the UniFi Controller API, and a multi-target exporter serving per-site
metrics to Prometheus.
"""

__version__ = "0.1.0"

from .api_client import UnifiController
from .collector import UnifiCollector
from .config import Config, load_config
from .models import (
    ControllerCredentials,
    ControllerStatus,
    DeviceMetrics,
    Metrics,
    UnifiSite,
)
from .exceptions import (
    UnifiControllerError,
    UnifiInvalidEndpointError,
    UnifiMissingCredentialsError,
    UnifiAPIError,
    UnifiUnexpectedStatusError,
    UnifiRequestRejectedError,
    UnifiDataError,
    UnifiSiteNotFoundError,
    UnifiModelError,
    UnifiConfigError,
)

__all__ = [
    "UnifiController",
    "UnifiCollector",
    "Config",
    "load_config",
    "ControllerCredentials",
    "ControllerStatus",
    "DeviceMetrics",
    "Metrics",
    "UnifiSite",
    "UnifiControllerError",
    "UnifiInvalidEndpointError",
    "UnifiMissingCredentialsError",
    "UnifiAPIError",
    "UnifiUnexpectedStatusError",
    "UnifiRequestRejectedError",
    "UnifiDataError",
    "UnifiSiteNotFoundError",
    "UnifiModelError",
    "UnifiConfigError",
]
