"""
Models for UniFi devices as returned by ``/api/s/{site}/stat/device``.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Optional

# Indexed by the integer ``state`` reported for a device.
DEVICE_STATUS_LABELS = (
    "disconnected",
    "connected",
    "pending",
    "firmware mismatch",
    "upgrading",
    "provisioning",
    "heartbeat missed",
    "adopting",
    "deleting",
    "inform error",
    "adoption failed",
    "isolated",
)

RADIO_BANDS = MappingProxyType({
    "na": "5",
    "ng": "2.4",
})


@dataclass
class UnifiDevice:
    """
    Represents a UniFi network device.

    Only the fields needed for metrics are modelled. The device inventory
    endpoint also lists unadopted devices seen by the controller, whatever
    site they belong to, so ``adopted`` must be checked before use.
    """
    mac: Optional[str] = None
    # Short model code, e.g. "U7PG2"
    model: Optional[str] = None
    # Firmware version
    version: Optional[str] = None
    adopted: Optional[bool] = None
    lts: Optional[bool] = field(default=None, metadata={"unifi_api_field": "model_in_lts"})
    eol: Optional[bool] = field(default=None, metadata={"unifi_api_field": "model_in_eol"})
    state: Optional[int] = None
    last_seen: Optional[int] = None
    uptime: Optional[int] = None

    # {"loadavg_1": "0.42", ...}, load averages encoded as (quoted) strings
    sys_stats: Optional[Dict[str, Any]] = None
    # {"type": "wire"|"wireless", "full_duplex": bool, "speed": MBit/s}
    uplink: Optional[Dict[str, Any]] = None
    # Virtual APs: [{"num_sta": int, "radio": "na"|"ng", ...}]
    vap_table: Optional[List[Dict[str, Any]]] = None

    _extra_fields: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def load1(self) -> Any:
        return (self.sys_stats or {}).get("loadavg_1")
