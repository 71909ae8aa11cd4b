"""
Data models for UniFi Controller API responses and derived metrics.

.. warning::
    The response models (``UnifiSite``, ``UnifiSiteHealth``, ``UnifiDevice``)
    describe commonly observed fields of the UniFi Controller's **undocumented**
    private API. The controller may omit any of them or send additional ones;
    missing fields keep their default, unknown fields are collected in the
    ``_extra_fields`` attribute.

    ``Metrics`` and ``DeviceMetrics`` are the immutable, normalized snapshot
    handed to metrics consumers.
"""

from .controller import ControllerCredentials
from .device import UnifiDevice, DEVICE_STATUS_LABELS, RADIO_BANDS
from .site import UnifiSite
from .health import UnifiSiteHealth
from .metrics import ControllerStatus, DeviceMetrics, Metrics

__all__ = [
    "ControllerCredentials",
    "UnifiDevice",
    "DEVICE_STATUS_LABELS",
    "RADIO_BANDS",
    "UnifiSite",
    "UnifiSiteHealth",
    "ControllerStatus",
    "DeviceMetrics",
    "Metrics",
]
