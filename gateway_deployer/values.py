"""Module for deriving helm values from a Gateway.

The values are a plain tree of JSON compatible types, built fresh on every
reconciliation from the Gateway and the process wide `Inputs`.
"""

from collections.abc import Callable, Mapping
import logging
import os
from typing import Any

from .config import (
    CLUSTER_DOMAIN,
    GATEWAY_DEPLOYER_IMAGE_ENV,
    GLOO_SYSTEM,
    Inputs,
)
from .manifest import Gateway
from .ports import translate_port as default_translate_port

__all__ = [
    "gateway_ports",
    "image_values",
    "gateway_values",
    "xds_host",
]

_LOGGER = logging.getLogger(__name__)

SERVICE_PROTOCOL = "TCP"
DEFAULT_SERVICE_TYPE = "LoadBalancer"


def gateway_ports(
    gateway: Gateway, translate_port: Callable[[int], int] = default_translate_port
) -> list[dict[str, Any]]:
    """Return the Service ports for the listeners of the Gateway.

    Listeners sharing a port number collapse into a single entry named after
    the first of them. The result is always a list, since the chart fails on
    a missing value.
    """
    ports: list[dict[str, Any]] = []
    seen: set[int] = set()
    for listener in gateway.listeners:
        if listener.port in seen:
            continue
        seen.add(listener.port)
        ports.append(
            {
                "port": listener.port,
                "targetPort": translate_port(listener.port),
                "protocol": SERVICE_PROTOCOL,
                "name": listener.name,
            }
        )
    return ports


def image_values(env: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Return image values from the `repository:tag` override, if any.

    An override that is not exactly one repository and one tag is ignored and
    the chart defaults are used instead.
    """
    if env is None:
        env = os.environ
    # An empty tag makes the chart fall back to its appVersion
    default_values: dict[str, Any] = {"tag": ""}
    if not (image := env.get(GATEWAY_DEPLOYER_IMAGE_ENV)):
        return default_values
    parts = image.split(":")
    if len(parts) != 2:
        _LOGGER.debug(
            "Ignoring %s=%s, expected repository:tag",
            GATEWAY_DEPLOYER_IMAGE_ENV,
            image,
        )
        return default_values
    return {
        "repository": parts[0],
        "tag": parts[1],
    }


def xds_host() -> str:
    """Return the address of the control plane Service.

    This assumes the control plane is installed in the well known namespace.
    """
    return f"gloo.{GLOO_SYSTEM}.svc.{CLUSTER_DOMAIN}"


def gateway_values(
    gateway: Gateway,
    inputs: Inputs,
    env: Mapping[str, str] | None = None,
    translate_port: Callable[[int], int] = default_translate_port,
) -> dict[str, Any]:
    """Return the helm values used to render the proxy for the Gateway."""
    vals: dict[str, Any] = {
        "controlPlane": {
            "enabled": False,
        },
        "gateway": {
            "enabled": True,
            "name": gateway.name,
            "gatewayName": gateway.name,
            "ports": gateway_ports(gateway, translate_port),
            "service": {
                "type": DEFAULT_SERVICE_TYPE,
            },
            "istioSDS": {
                "enabled": inputs.istio_values.sds_enabled,
            },
            # The proxy connects to this address on startup to receive xDS
            # updates. The port is the bind port of the control plane server,
            # which is assumed to be the port exposed by its Service.
            "xds": {
                "host": xds_host(),
                "port": inputs.port,
            },
            "image": image_values(env),
        },
    }
    if inputs.dev:
        vals["develop"] = True
    return vals
