"""
Snapshot values returned to metrics consumers.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class ControllerStatus:
    """Result of ``GET /status``."""
    version: str = ""
    up: bool = False


@dataclass(frozen=True)
class DeviceMetrics:
    """
    Facts derived from one adopted device.

    ``uplink_speed`` is the wired link speed in MBit/s, or -1 for a wireless
    (mesh) uplink. ``load`` is -1 when the controller sent an unparseable value.
    ``last_seen`` is None when the controller never observed the device.
    """
    mac: str
    firmware: str = ""
    model: str = ""
    model_name: str = "unknown"
    lts: bool = False
    eol: bool = False
    status: int = 0
    status_label: str = ""
    uptime: timedelta = timedelta(0)
    last_seen: Optional[datetime] = None
    uplink: str = ""
    uplink_speed: int = -1
    load: float = 0.0
    # Band label ("2.4", "5", or the raw radio code) to connected clients
    radios: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Metrics:
    """One consistent read of a site's metrics."""
    controller_version: str = ""

    avg_wifi_utilization_24: float = 0.0
    avg_wifi_utilization_50: float = 0.0
    avg_wifi_score: float = 0.0

    clients_poor_score: int = 0
    clients_fair_score: int = 0
    clients_good_score: int = 0

    devices: Tuple[DeviceMetrics, ...] = ()
