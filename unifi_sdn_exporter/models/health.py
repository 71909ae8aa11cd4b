"""
Models for the UniFi site health widget.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class UnifiSiteHealth:
    """
    Represents the single entry returned by ``/api/s/{site}/stat/widget/health``.

    ``average_wifi_utilization`` is keyed by radio code (``ng`` for 2.4 GHz,
    ``na`` for 5 GHz). ``wifi_score`` carries the average client score and the
    client counts by rating.
    """
    average_wifi_utilization: Optional[Dict[str, Any]] = None
    wifi_score: Optional[Dict[str, Any]] = None

    _extra_fields: Dict[str, Any] = field(default_factory=dict, repr=False)

    def utilization(self, radio: str) -> float:
        """Average utilization of one radio, 0 when not reported."""
        return float((self.average_wifi_utilization or {}).get(radio) or 0)

    @property
    def client_score_avg(self) -> float:
        return float((self.wifi_score or {}).get("client_score_avg") or 0)

    @property
    def poor_clients(self) -> int:
        return int((self.wifi_score or {}).get("clients_with_poor_score") or 0)

    @property
    def fair_clients(self) -> int:
        return int((self.wifi_score or {}).get("clients_with_fair_score") or 0)

    @property
    def total_clients(self) -> int:
        return int((self.wifi_score or {}).get("clients") or 0)
