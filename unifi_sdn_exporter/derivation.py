"""
Derivation of normalized metrics from raw controller responses.

The controller reports most device facts as loosely typed JSON. Diagnostic
fields that cannot be interpreted degrade to placeholder values instead of
failing the whole snapshot.
"""

import re
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional

from .models.device import UnifiDevice, DEVICE_STATUS_LABELS, RADIO_BANDS
from .models.health import UnifiSiteHealth
from .models.metrics import DeviceMetrics, Metrics
from .utils import load_device_models
from .logging import get_logger

logger = get_logger(__name__)

UNKNOWN_MODEL = "unknown"

# Reported when a value is missing or meaningless (wireless uplink speed,
# unparseable load).
SENTINEL = -1

# Plain decimal float syntax: no surrounding whitespace, no digit separators
LOAD_PATTERN = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)", re.IGNORECASE)


def status_label(state: int) -> str:
    if 0 <= state < len(DEVICE_STATUS_LABELS):
        return DEVICE_STATUS_LABELS[state]
    return f"unknown ({state})"


def model_name(model: Optional[str]) -> str:
    """Human product name for a short model code, "unknown" if not in the database."""
    if not model:
        return UNKNOWN_MODEL
    return load_device_models().get(model, UNKNOWN_MODEL)


def band(radio: str) -> str:
    """Map a radio code ("na", "ng") to its band label; other codes pass through."""
    return RADIO_BANDS.get(radio, radio)


def parse_load(value: Any) -> float:
    """
    Parse a load average as reported in ``sys_stats``.

    The controller sends a string, sometimes wrapped in an extra pair of
    double quotes. A missing or empty value is 0, an unparseable one is -1.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(SENTINEL)
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value)
    if not text:
        return 0.0
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        text = text[1:-1]
    if not LOAD_PATTERN.fullmatch(text):
        logger.debug(f"Cannot parse load average {value!r}")
        return float(SENTINEL)
    return float(text)


def uplink_description(uplink: Optional[Mapping[str, Any]]) -> str:
    """
    Describe a device uplink: "<speed>FD"/"<speed>HD" for wired links,
    "Mesh" for wireless ones.
    """
    uplink = uplink or {}
    uplink_type = uplink.get("type") or ""
    if uplink_type == "wire":
        duplex = "FD" if uplink.get("full_duplex") else "HD"
        return f"{int(uplink.get('speed') or 0)}{duplex}"
    if uplink_type == "wireless":
        return "Mesh"
    return f"unknown ({uplink_type})"


def uplink_speed(uplink: Optional[Mapping[str, Any]]) -> int:
    """Wired uplink speed in MBit/s, -1 for any other uplink."""
    uplink = uplink or {}
    if uplink.get("type") == "wire":
        return int(uplink.get("speed") or 0)
    return SENTINEL


def aggregate_radios(vap_table: Optional[Iterable[Mapping[str, Any]]]) -> Mapping[str, int]:
    """Sum connected clients of all virtual APs per band."""
    clients = defaultdict(int)
    for vap in vap_table or ():
        clients[band(str(vap.get("radio") or ""))] += int(vap.get("num_sta") or 0)
    return MappingProxyType(dict(clients))


def last_seen_time(timestamp: Optional[int]) -> Optional[datetime]:
    """Convert a Unix timestamp to an aware datetime; 0 means never seen."""
    if not timestamp:
        return None
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc)


def derive_device_metrics(device: UnifiDevice) -> Optional[DeviceMetrics]:
    """
    Normalize one inventory record.

    Returns:
        The derived metrics, or None when the device is not adopted. The
        inventory lists unadopted devices in every site.
    """
    if not device.adopted:
        return None

    state = int(device.state or 0)
    return DeviceMetrics(
        mac=device.mac or "",
        firmware=device.version or "",
        model=device.model or "",
        model_name=model_name(device.model),
        lts=bool(device.lts),
        eol=bool(device.eol),
        status=state,
        status_label=status_label(state),
        uptime=timedelta(seconds=int(device.uptime or 0)),
        last_seen=last_seen_time(device.last_seen),
        uplink=uplink_description(device.uplink),
        uplink_speed=uplink_speed(device.uplink),
        load=parse_load(device.load1),
        radios=aggregate_radios(device.vap_table),
    )


def build_metrics(
    controller_version: str,
    health: UnifiSiteHealth,
    devices: Iterable[UnifiDevice],
) -> Metrics:
    """
    Assemble a snapshot from the status, health and device responses.

    The health widget only reports total, poor and fair client counts; the
    good count is the remainder.
    """
    device_metrics: List[DeviceMetrics] = []
    skipped = 0
    for device in devices:
        dm = derive_device_metrics(device)
        if dm is None:
            skipped += 1
            continue
        device_metrics.append(dm)

    if skipped:
        logger.debug(f"Skipped {skipped} unadopted devices")

    poor = health.poor_clients
    fair = health.fair_clients
    return Metrics(
        controller_version=controller_version,
        avg_wifi_utilization_24=health.utilization("ng"),
        avg_wifi_utilization_50=health.utilization("na"),
        avg_wifi_score=health.client_score_avg,
        clients_poor_score=poor,
        clients_fair_score=fair,
        clients_good_score=health.total_clients - (poor + fair),
        devices=tuple(device_metrics),
    )
