"""
Prometheus collector exposing one site of one controller.
"""

from typing import Iterator, List, Optional

from prometheus_client.core import GaugeMetricFamily, Metric
from prometheus_client.registry import Collector

from .api_client import UnifiController
from .exceptions import UnifiControllerError
from .logging import get_logger

logger = get_logger(__name__)

NAMESPACE = "unifi_sdn"
DEVICE_LABELS = ["mac"]


def _gauge(subsystem: str, name: str, documentation: str, labels: List[str]) -> GaugeMetricFamily:
    return GaugeMetricFamily(f"{NAMESPACE}_{subsystem}_{name}", documentation, labels=labels)


def _controller_gauge(name, documentation, *labels):
    return _gauge("controller", name, documentation, list(labels))


def _site_gauge(name, documentation, *labels):
    return _gauge("site", name, documentation, list(labels))


def _device_gauge(name, documentation, *labels):
    return _gauge("device", name, documentation, DEVICE_LABELS + list(labels))


class UnifiCollector(Collector):
    """
    Collects a fresh metrics snapshot on every scrape.

    Register it with a per-request ``CollectorRegistry``. If the snapshot
    cannot be collected, only ``unifi_sdn_controller_up`` is reported, with
    value 0 and an empty version label.

    Args:
        client: Controller to scrape.
        site: Site short code or display name.
        failure: Error already raised while serving this scrape; the
                 controller is reported down without being queried again.
    """

    def __init__(
        self,
        client: UnifiController,
        site: str,
        failure: Optional[UnifiControllerError] = None,
    ):
        self.client = client
        self.site = site
        self.failure = failure

    def describe(self) -> Iterator[Metric]:
        # families without samples
        return iter(self._families().values())

    def _families(self):
        return {
            "up": _controller_gauge("up", "indicator whether controller is reachable", "version"),
            "wifi_util": _site_gauge("wifi_utilization", "average Wifi utilization", "band"),
            "wifi_score": _site_gauge("wifi_client_score", "average client score"),
            "wifi_clients": _site_gauge("wifi_clients_count", "number of clients by rating", "rating"),
            "status": _device_gauge(
                "status", "current device status", "desc", "model_id", "model", "firmware"),
            "uptime": _device_gauge("uptime", "uptime of device in seconds"),
            "load": _device_gauge("load", "current system load of endpoint"),
            "clients": _device_gauge("clients", "number of connected WLAN clients", "band"),
            "uplink": _device_gauge("uplink", "uplink type and speed", "type"),
            "last_seen": _device_gauge("last_seen", "last time the controller saw the device, as Unix timestamp"),
        }

    def collect(self) -> Iterator[Metric]:
        families = self._families()
        up = families.pop("up")

        failure = self.failure
        if failure is None:
            try:
                m = self.client.metrics(self.site)
            except UnifiControllerError as e:
                failure = e

        if failure is not None:
            logger.error(f"Fetching metrics for {self.client.target_name}/{self.site} failed: {failure}")
            up.add_metric([""], 0)
            yield up
            return

        up.add_metric([m.controller_version], 1)
        yield up

        families["wifi_util"].add_metric(["2.4"], m.avg_wifi_utilization_24)
        families["wifi_util"].add_metric(["5"], m.avg_wifi_utilization_50)
        families["wifi_score"].add_metric([], m.avg_wifi_score)
        families["wifi_clients"].add_metric(["poor"], m.clients_poor_score)
        families["wifi_clients"].add_metric(["fair"], m.clients_fair_score)
        families["wifi_clients"].add_metric(["good"], m.clients_good_score)

        for d in m.devices:
            families["status"].add_metric(
                [d.mac, d.status_label, d.model, d.model_name, d.firmware], d.status)

            if d.last_seen is not None:
                families["last_seen"].add_metric([d.mac], d.last_seen.timestamp())

            uptime = d.uptime.total_seconds()
            families["uptime"].add_metric([d.mac], uptime)
            if uptime == 0:
                continue

            families["load"].add_metric([d.mac], d.load)
            families["uplink"].add_metric([d.mac, d.uplink], d.uplink_speed)
            for band, clients in sorted(d.radios.items()):
                families["clients"].add_metric([d.mac, band], clients)

        yield from families.values()
