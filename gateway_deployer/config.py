"""Configuration objects for gateway-deployer.

These are constructed once at process start and are not reloaded.
"""

from dataclasses import dataclass, field

__all__ = [
    "Inputs",
    "IstioValues",
    "GLOO_SYSTEM",
    "CLUSTER_DOMAIN",
    "GATEWAY_DEPLOYER_IMAGE_ENV",
]

GLOO_SYSTEM = "gloo-system"
"""Namespace the control plane is assumed to be installed in."""

CLUSTER_DOMAIN = "cluster.local"

GATEWAY_DEPLOYER_IMAGE_ENV = "GLOO_GATEWAY_DEPLOYER_IMAGE"
"""Environment variable holding an optional `repository:tag` image override."""

DEFAULT_XDS_PORT = 9977


@dataclass(frozen=True)
class IstioValues:
    """Istio integration settings passed through to the proxy."""

    sds_enabled: bool = False
    """Run the SDS sidecar for mutual TLS with Istio issued certificates."""


@dataclass(frozen=True)
class Inputs:
    """The set of options used to configure the gateway deployer."""

    controller_name: str
    """Controller name, used as the field owner for server side apply."""

    dev: bool = False
    """Render the proxy in develop mode."""

    port: int = DEFAULT_XDS_PORT
    """Port the control plane xDS server is bound to."""

    istio_values: IstioValues = field(default_factory=IstioValues)
