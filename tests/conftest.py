"""Shared fixtures: a fake UniFi controller behind a mocked requests session."""

import json
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import Mock
from urllib.parse import urlsplit

import pytest

from unifi_sdn_exporter.api_client import UnifiController
from unifi_sdn_exporter.models.controller import ControllerCredentials


def make_response(status: int = 200, payload: Any = None, content: Optional[bytes] = None) -> Mock:
    """Build a stand-in for requests.Response."""
    response = Mock()
    response.status_code = status
    if content is None:
        content = json.dumps(payload).encode("utf-8") if payload is not None else b""
    response.content = content
    if payload is None:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    else:
        response.json.return_value = payload
    return response


def envelope(data: Any = None, rc: str = "ok", msg: Optional[str] = None, **meta) -> Dict[str, Any]:
    body: Dict[str, Any] = {"meta": {"rc": rc, **meta}}
    if msg is not None:
        body["meta"]["msg"] = msg
    if data is not None:
        body["data"] = data
    return body


class FakeController:
    """
    Emulates the session handling of a UniFi controller.

    Every GET requires a prior successful login; ``expire_session()`` drops
    the session as the controller does after its idle timeout. Responses are
    looked up by path, either as a payload (wrapped into an ok envelope) or
    as a prepared response.
    """

    def __init__(self, username: str = "admin", password: str = "secret"):
        self.username = username
        self.password = password
        self.logged_in = False
        self.accept_logins = True
        self.payloads: Dict[str, Any] = {}
        self.responses: Dict[str, Mock] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []

    def expire_session(self) -> None:
        self.logged_in = False

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p, _ in self.calls if m == method and p == path)

    @property
    def logins(self) -> int:
        return self.count("POST", "/api/login")

    def __call__(self, method: str, url: str, **kwargs) -> Mock:
        path = urlsplit(url).path
        self.calls.append((method, path, kwargs))

        if method == "POST" and path == "/api/login":
            body = kwargs.get("json") or {}
            if (self.accept_logins and body.get("username") == self.username
                    and body.get("password") == self.password):
                self.logged_in = True
                return make_response(200, envelope(data=[]))
            return make_response(400, envelope(rc="error", msg="api.err.Invalid"))

        if not self.logged_in:
            return make_response(401, envelope(rc="error", msg="api.err.LoginRequired"))

        if path in self.responses:
            return self.responses[path]
        if path in self.payloads:
            return make_response(200, envelope(data=self.payloads[path]))
        if path == "/status":
            return make_response(200, envelope(data=[], server_version="6.5.55", up=True))
        return make_response(404, content=b"Not Found")


SITES = [
    {"_id": "5f0c", "name": "default", "desc": "Headquarters", "role": "admin"},
    {"_id": "5f0d", "name": "x1y2z3", "desc": "Branch Office", "role": "admin"},
    {"_id": "5f0e", "name": "lab", "desc": "default", "role": "admin"},
]

HEALTH = [{
    "average_wifi_utilization": {"na": 12.5, "ng": 40.25},
    "wifi_score": {
        "client_score_avg": 87.5,
        "clients_with_poor_score": 10,
        "clients_with_fair_score": 20,
        "clients": 100,
    },
}]

DEVICES = [
    {
        "mac": "80:2a:a8:00:00:01",
        "model": "U7PG2",
        "version": "4.3.28.11361",
        "adopted": True,
        "model_in_lts": False,
        "model_in_eol": False,
        "state": 1,
        "last_seen": 1600000000,
        "uptime": 3600,
        "sys_stats": {"loadavg_1": "\"0.42\"", "loadavg_5": "0.30"},
        "uplink": {"type": "wire", "full_duplex": True, "speed": 1000},
        "vap_table": [
            {"radio": "ng", "num_sta": 3, "essid": "office"},
            {"radio": "ng", "num_sta": 4, "essid": "guest"},
            {"radio": "na", "num_sta": 9, "essid": "office"},
        ],
        "name": "AP Lobby",
    },
    {
        "mac": "80:2a:a8:00:00:02",
        "model": "UAL6",
        "version": "6.0.15",
        "adopted": True,
        "state": 1,
        "last_seen": 1600000010,
        "uptime": 120,
        "sys_stats": {"loadavg_1": "0.05"},
        "uplink": {"type": "wireless"},
        "vap_table": [{"radio": "na", "num_sta": 2}],
    },
    {
        "mac": "80:2a:a8:00:00:03",
        "model": "US8P60",
        "version": "5.43.23",
        "adopted": False,
        "state": 2,
        "last_seen": 0,
        "uptime": 0,
    },
]


@pytest.fixture
def credentials() -> ControllerCredentials:
    return ControllerCredentials(
        alias="main",
        url="https://unifi.example.com:8443",
        username="admin",
        password="secret",  # pragma: allowlist secret
    )


@pytest.fixture
def fake_controller() -> FakeController:
    fake = FakeController()
    fake.payloads["/api/self/sites"] = SITES
    fake.payloads["/api/s/default/stat/widget/health"] = HEALTH
    fake.payloads["/api/s/default/stat/device"] = DEVICES
    return fake


@pytest.fixture
def controller(credentials, fake_controller) -> UnifiController:
    client = UnifiController(credentials)
    client.session.request = Mock(side_effect=fake_controller)
    return client
