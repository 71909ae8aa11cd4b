"""
Models for UniFi sites.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class UnifiSite:
    """
    Represents a UniFi site as listed by ``/api/self/sites``.

    A site in UniFi represents a logical grouping of devices and network segments,
    typically representing a physical location or organization.
    """
    # Internal short code used in /api/s/{name}/... paths
    name: str
    # Human readable site name
    desc: Optional[str] = None
    # BSON ObjectId
    _id: Optional[str] = None

    _extra_fields: Dict[str, Any] = field(
        default_factory=dict, repr=False, compare=False)
