"""Fixtures shared by the gateway-deployer tests."""

from typing import Any

import pytest

from gateway_deployer.config import Inputs
from gateway_deployer.decoder import default_scheme
from gateway_deployer.deployer import Deployer
from gateway_deployer.manifest import Gateway, Listener

from .fakes import FakeClient, FakeHelm

CONTROLLER_NAME = "solo.io/gloo-gateway"


@pytest.fixture(name="inputs")
def inputs_fixture() -> Inputs:
    """Fixture for the process wide deployer inputs."""
    return Inputs(controller_name=CONTROLLER_NAME, port=9977)


@pytest.fixture(name="extra_docs")
def extra_docs_fixture() -> list[Any]:
    """Fixture for additional documents rendered by the fake renderer."""
    return []


@pytest.fixture(name="fake_helm")
def fake_helm_fixture(extra_docs: list[Any]) -> FakeHelm:
    """Fixture for a renderer that does not need the helm binary."""
    return FakeHelm(extra_docs)


@pytest.fixture(name="client")
def client_fixture() -> FakeClient:
    """Fixture for an in memory cluster client."""
    return FakeClient()


@pytest.fixture(name="deployer")
def deployer_fixture(inputs: Inputs, fake_helm: FakeHelm) -> Deployer:
    """Fixture for a Deployer using the fake renderer."""
    return Deployer(default_scheme(), inputs, fake_helm)


@pytest.fixture(name="gateway")
def gateway_fixture() -> Gateway:
    """Fixture for a Gateway with two listeners."""
    return Gateway(
        name="gw",
        namespace="ns1",
        uid="1234-abcd",
        listeners=[
            Listener(name="http", port=80),
            Listener(name="https", port=443, protocol="HTTPS"),
        ],
    )


@pytest.fixture(autouse=True)
def clear_image_override(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the image override from the test environment does not leak in."""
    monkeypatch.delenv("GLOO_GATEWAY_DEPLOYER_IMAGE", raising=False)
