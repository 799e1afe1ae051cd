"""Tests rendering the embedded proxy chart with helm."""

import shutil

import pytest
import yaml

from gateway_deployer.config import Inputs, IstioValues
from gateway_deployer.deployer import Deployer
from gateway_deployer.helm import CHART_DIR, Helm, load_chart
from gateway_deployer.manifest import (
    ConfigMap,
    Deployment,
    Gateway,
    GroupVersionKind,
    Listener,
    Service,
    ServiceAccount,
)
from gateway_deployer.values import gateway_values

pytestmark = pytest.mark.skipif(
    shutil.which("helm") is None, reason="helm binary is not installed"
)

EXPECTED_GVKS = [
    GroupVersionKind("", "v1", "ServiceAccount"),
    GroupVersionKind("", "v1", "ConfigMap"),
    GroupVersionKind("apps", "v1", "Deployment"),
    GroupVersionKind("", "v1", "Service"),
]


@pytest.fixture(name="chart_deployer")
def chart_deployer_fixture(inputs: Inputs) -> Deployer:
    """Fixture for a Deployer using the embedded chart."""
    return Deployer.create(inputs)


async def test_gvks_to_watch(chart_deployer: Deployer) -> None:
    """Test the kinds rendered by the embedded chart."""
    assert await chart_deployer.get_gvks_to_watch() == EXPECTED_GVKS


async def test_gvks_stable_across_listeners(chart_deployer: Deployer) -> None:
    """Test a Gateway with five listeners renders the same kinds."""
    gateway = Gateway(
        name="five",
        namespace="other",
        listeners=[Listener(name=f"listener-{i}", port=80 + i) for i in range(5)],
    )
    objs = await chart_deployer.render_chart_to_objects(gateway)
    kinds = []
    for obj in objs:
        if obj.gvk not in kinds:
            kinds.append(obj.gvk)
    assert kinds == EXPECTED_GVKS


async def test_objects_to_deploy(chart_deployer: Deployer, gateway: Gateway) -> None:
    """Test the objects rendered for a Gateway."""
    objs = await chart_deployer.get_objs_to_deploy(gateway)
    assert [type(obj) for obj in objs] == [
        ServiceAccount,
        ConfigMap,
        Deployment,
        Service,
    ]
    assert {obj.name for obj in objs} == {"gloo-proxy-gw"}
    assert {obj.namespace for obj in objs} == {"ns1"}
    for obj in objs:
        assert len(obj.owner_references) == 1
        assert obj.owner_references[0].uid == "1234-abcd"

    service = objs[3]
    assert isinstance(service, Service)
    assert service.spec["type"] == "LoadBalancer"
    assert service.spec["ports"] == [
        {"name": "http", "protocol": "TCP", "port": 80, "targetPort": 8080},
        {"name": "https", "protocol": "TCP", "port": 443, "targetPort": 8443},
    ]

    config_map = objs[1]
    assert isinstance(config_map, ConfigMap)
    assert config_map.data
    assert "gloo.gloo-system.svc.cluster.local" in config_map.data["envoy.yaml"]
    assert "port_value: 9977" in config_map.data["envoy.yaml"]

    deployment = objs[2]
    assert isinstance(deployment, Deployment)
    container = deployment.spec["template"]["spec"]["containers"][0]
    assert container["image"] == "quay.io/solo-io/gloo-envoy-wrapper:1.0.0-ci"
    assert [port["containerPort"] for port in container["ports"]] == [8080, 8443]


async def test_image_override(
    chart_deployer: Deployer, gateway: Gateway, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test the image override replaces the chart default."""
    monkeypatch.setenv("GLOO_GATEWAY_DEPLOYER_IMAGE", "myrepo:v2")
    objs = await chart_deployer.get_objs_to_deploy(gateway)
    deployment = objs[2]
    assert isinstance(deployment, Deployment)
    container = deployment.spec["template"]["spec"]["containers"][0]
    assert container["image"] == "myrepo:v2"


async def test_dev_and_sds(gateway: Gateway) -> None:
    """Test develop mode and the SDS sidecar."""
    deployer = Deployer.create(
        Inputs(
            controller_name="test",
            dev=True,
            istio_values=IstioValues(sds_enabled=True),
        ),
        version="2.0.0",
    )
    objs = await deployer.get_objs_to_deploy(gateway)
    deployment = objs[2]
    assert isinstance(deployment, Deployment)
    containers = deployment.spec["template"]["spec"]["containers"]
    assert [container["name"] for container in containers] == ["gloo-gateway", "sds"]
    assert "--log-level" in containers[0]["args"]
    assert containers[0]["image"] == "quay.io/solo-io/gloo-envoy-wrapper:2.0.0"


@pytest.mark.parametrize("name", ["123", "true"])
async def test_label_values_are_strings(inputs: Inputs, name: str) -> None:
    """Test names that look like numbers or booleans render as strings."""
    gateway = Gateway(
        name=name, namespace="456", listeners=[Listener(name="80", port=80)]
    )
    helm = Helm(load_chart(CHART_DIR))
    content = await helm.render(name, gateway.namespace, gateway_values(gateway, inputs))
    docs = [doc for doc in yaml.safe_load_all(content) if doc]
    assert docs
    for doc in docs:
        metadata = doc["metadata"]
        assert metadata["namespace"] == "456"
        assert metadata["labels"]["app.kubernetes.io/instance"] == name
        assert metadata["labels"]["gateway.networking.k8s.io/gateway-name"] == name
    service = docs[-1]
    assert service["kind"] == "Service"
    assert service["spec"]["ports"][0]["name"] == "80"
    assert service["spec"]["selector"]["app.kubernetes.io/instance"] == name
