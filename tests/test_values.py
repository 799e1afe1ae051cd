"""Tests for deriving helm values from a Gateway."""

import pytest

from gateway_deployer.config import Inputs, IstioValues
from gateway_deployer.manifest import Gateway, Listener
from gateway_deployer.ports import translate_port
from gateway_deployer.values import gateway_ports, gateway_values, image_values


def test_duplicate_ports() -> None:
    """Test that the first listener using a port wins."""
    gateway = Gateway(
        name="gw",
        namespace="default",
        listeners=[
            Listener(name="a", port=80),
            Listener(name="b", port=80),
            Listener(name="c", port=443),
        ],
    )
    assert gateway_ports(gateway) == [
        {"port": 80, "targetPort": 8080, "protocol": "TCP", "name": "a"},
        {"port": 443, "targetPort": 8443, "protocol": "TCP", "name": "c"},
    ]


def test_no_listeners() -> None:
    """Test that a Gateway without listeners produces an empty port list."""
    assert gateway_ports(Gateway(name="gw", namespace="default")) == []


def test_custom_port_translation() -> None:
    """Test that the port translation function is used for the target port."""
    gateway = Gateway(
        name="gw", namespace="default", listeners=[Listener(name="a", port=80)]
    )
    ports = gateway_ports(gateway, lambda port: port + 1)
    assert ports[0]["targetPort"] == 81


@pytest.mark.parametrize(
    ("port", "expected"),
    [
        (80, 8080),
        (443, 8443),
        (1023, 9023),
        (1024, 1024),
        (8080, 8080),
    ],
)
def test_translate_port(port: int, expected: int) -> None:
    """Test translating privileged ports into the unprivileged range."""
    assert translate_port(port) == expected


@pytest.mark.parametrize(
    ("env", "expected"),
    [
        ({}, {"tag": ""}),
        ({"GLOO_GATEWAY_DEPLOYER_IMAGE": ""}, {"tag": ""}),
        (
            {"GLOO_GATEWAY_DEPLOYER_IMAGE": "myrepo:v2"},
            {"repository": "myrepo", "tag": "v2"},
        ),
        ({"GLOO_GATEWAY_DEPLOYER_IMAGE": "myrepo"}, {"tag": ""}),
        ({"GLOO_GATEWAY_DEPLOYER_IMAGE": "a:b:c"}, {"tag": ""}),
    ],
)
def test_image_values(env: dict[str, str], expected: dict[str, str]) -> None:
    """Test parsing the image override."""
    assert image_values(env) == expected


def test_image_values_read_at_call_time(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test the process environment is consulted on every call."""
    assert image_values() == {"tag": ""}
    monkeypatch.setenv("GLOO_GATEWAY_DEPLOYER_IMAGE", "registry.example/proxy:v3")
    assert image_values() == {"repository": "registry.example/proxy", "tag": "v3"}


def test_gateway_values(gateway: Gateway, inputs: Inputs) -> None:
    """Test the full set of values rendered for a Gateway."""
    vals = gateway_values(gateway, inputs, env={})
    assert vals == {
        "controlPlane": {"enabled": False},
        "gateway": {
            "enabled": True,
            "name": "gw",
            "gatewayName": "gw",
            "ports": [
                {"port": 80, "targetPort": 8080, "protocol": "TCP", "name": "http"},
                {"port": 443, "targetPort": 8443, "protocol": "TCP", "name": "https"},
            ],
            "service": {"type": "LoadBalancer"},
            "istioSDS": {"enabled": False},
            "xds": {
                "host": "gloo.gloo-system.svc.cluster.local",
                "port": 9977,
            },
            "image": {"tag": ""},
        },
    }


def test_gateway_values_dev_and_sds(gateway: Gateway) -> None:
    """Test values passed through from the process configuration."""
    inputs = Inputs(
        controller_name="test",
        dev=True,
        port=1234,
        istio_values=IstioValues(sds_enabled=True),
    )
    vals = gateway_values(gateway, inputs, env={})
    assert vals["develop"] is True
    assert vals["gateway"]["istioSDS"] == {"enabled": True}
    assert vals["gateway"]["xds"]["port"] == 1234


def test_gateway_values_deterministic(gateway: Gateway, inputs: Inputs) -> None:
    """Test that values are rebuilt identically and are not shared."""
    first = gateway_values(gateway, inputs, env={})
    second = gateway_values(gateway, inputs, env={})
    assert first == second
    assert first["gateway"]["ports"] is not second["gateway"]["ports"]
