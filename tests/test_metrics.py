"""Tests for the metrics retrieval pipeline against a fake controller."""

from datetime import timedelta

import pytest

from conftest import DEVICES, HEALTH, make_response
from unifi_sdn_exporter.exceptions import (
    UnifiDataError,
    UnifiSiteNotFoundError,
    UnifiUnexpectedStatusError,
)


class TestMetricsPipeline:
    """Test suite for UnifiController.metrics."""

    def test_snapshot(self, controller):
        m = controller.metrics("default")

        assert m.controller_version == "6.5.55"
        assert m.avg_wifi_utilization_24 == 40.25
        assert m.avg_wifi_utilization_50 == 12.5
        assert m.avg_wifi_score == 87.5
        assert (m.clients_poor_score, m.clients_fair_score, m.clients_good_score) == (10, 20, 70)

        assert [d.mac for d in m.devices] == ["80:2a:a8:00:00:01", "80:2a:a8:00:00:02"]
        ap, mesh = m.devices
        assert ap.model_name == "UniFi AP-AC-Pro"
        assert ap.status_label == "connected"
        assert ap.uptime == timedelta(hours=1)
        assert ap.load == 0.42
        assert ap.uplink == "1000FD"
        assert ap.uplink_speed == 1000
        assert dict(ap.radios) == {"2.4": 7, "5": 9}
        assert mesh.uplink == "Mesh"
        assert mesh.uplink_speed == -1

    def test_site_by_display_name_uses_short_code_in_paths(self, controller, fake_controller):
        controller.metrics("Headquarters")

        paths = [p for _, p, _ in fake_controller.calls]
        assert "/api/s/default/stat/widget/health" in paths
        assert "/api/s/default/stat/device" in paths

    def test_request_order(self, controller, fake_controller):
        controller.metrics("default")

        gets = [p for m, p, _ in fake_controller.calls if m == "GET"]
        assert gets == [
            "/api/self/sites",
            "/api/self/sites",
            "/status",
            "/api/s/default/stat/widget/health",
            "/api/s/default/stat/device",
        ]
        assert fake_controller.logins == 1

    def test_two_snapshots_within_ttl_fetch_sites_once(self, controller, fake_controller):
        first = controller.metrics("default")
        second = controller.metrics("default")

        assert first is not second
        assert first.clients_good_score == second.clients_good_score
        assert [d.mac for d in first.devices] == [d.mac for d in second.devices]
        # the first site list request was rejected before logging in
        assert fake_controller.count("GET", "/api/self/sites") == 2
        assert fake_controller.count("GET", "/status") == 2
        assert fake_controller.count("GET", "/api/s/default/stat/widget/health") == 2
        assert fake_controller.count("GET", "/api/s/default/stat/device") == 2

    @pytest.mark.parametrize("health", [[], HEALTH * 2])
    def test_health_must_have_exactly_one_entry(self, controller, fake_controller, health):
        fake_controller.payloads["/api/s/default/stat/widget/health"] = health

        with pytest.raises(UnifiDataError, match="Unexpected result length"):
            controller.metrics("default")

        assert fake_controller.count("GET", "/api/s/default/stat/device") == 0

    def test_unknown_site(self, controller, fake_controller):
        with pytest.raises(UnifiSiteNotFoundError):
            controller.metrics("nowhere")

        assert fake_controller.count("GET", "/status") == 0

    def test_status_failure_aborts(self, controller, fake_controller):
        fake_controller.responses["/status"] = make_response(502, content=b"Bad Gateway")

        with pytest.raises(UnifiUnexpectedStatusError):
            controller.metrics("default")

        assert fake_controller.count("GET", "/api/s/default/stat/widget/health") == 0

    def test_device_failure_aborts(self, controller, fake_controller):
        fake_controller.responses["/api/s/default/stat/device"] = make_response(500, content=b"")

        with pytest.raises(UnifiUnexpectedStatusError):
            controller.metrics("default")

    def test_session_expiry_between_snapshots(self, controller, fake_controller):
        controller.metrics("default")
        fake_controller.expire_session()

        controller.metrics("default")

        assert fake_controller.logins == 2
        assert fake_controller.count("GET", "/status") == 3

    def test_unadopted_devices_never_included(self, controller, fake_controller):
        fake_controller.payloads["/api/s/default/stat/device"] = [
            {"mac": "00:00:00:00:00:0%d" % i, "adopted": False, "state": 1, "uptime": 10}
            for i in range(5)
        ]

        m = controller.metrics("default")

        assert m.devices == ()

    @pytest.mark.parametrize("fields", [
        {"uplink": "wire"},
        {"sys_stats": ["0.5"]},
        {"uplink": {"type": "wire", "speed": "1G"}},
        {"vap_table": ["ng"]},
        {"vap_table": [{"radio": "ng", "num_sta": "many"}]},
        {"state": "connected"},
        {"uptime": "1h"},
        {"last_seen": "yesterday"},
    ])
    def test_mistyped_device_fields_are_malformed(self, controller, fake_controller, fields):
        fake_controller.payloads["/api/s/default/stat/device"] = [{**DEVICES[0], **fields}]

        with pytest.raises(UnifiDataError, match="Failed to decode metrics of site default"):
            controller.metrics("default")

    @pytest.mark.parametrize("health", [
        {"wifi_score": "good"},
        {"average_wifi_utilization": [12.5]},
        {"wifi_score": {"clients": "lots"}},
    ])
    def test_mistyped_health_fields_are_malformed(self, controller, fake_controller, health):
        fake_controller.payloads["/api/s/default/stat/widget/health"] = [health]

        with pytest.raises(UnifiDataError):
            controller.metrics("default")
