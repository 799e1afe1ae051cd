"""Deploys the proxy workload for a Gateway.

The `Deployer` renders the embedded chart for a `Gateway`, decodes the output
into objects, stamps them with the Gateway namespace and a controller owner
reference, and applies them to the cluster:

```python
from gateway_deployer.client import KubectlClient
from gateway_deployer.config import Inputs
from gateway_deployer.deployer import Deployer

deployer = Deployer.create(Inputs(controller_name="solo.io/gloo-gateway"))
await deployer.deploy(gateway, KubectlClient())
```

Objects are applied one at a time in manifest order. The first failure stops
the batch and objects applied before it are left in place; the controller is
expected to reconcile again on the next change.
"""

from collections.abc import Callable, Sequence
from pathlib import Path
import logging
from typing import Any

from .client import Client
from .config import Inputs
from .context import trace_context
from .decoder import Scheme, convert_yaml_to_objects, default_scheme
from .exceptions import ApplyException, CommandException, DecodeException
from .helm import CHART_DIR, Helm, Options, load_chart
from .manifest import (
    Gateway,
    GroupVersionKind,
    OwnerReference,
    ResourceObject,
)
from .ports import translate_port as default_translate_port
from .values import gateway_values

__all__ = [
    "Deployer",
    "WATCH_GATEWAY_NAME",
    "WATCH_GATEWAY_NAMESPACE",
]

_LOGGER = logging.getLogger(__name__)

WATCH_GATEWAY_NAME = "default"
WATCH_GATEWAY_NAMESPACE = "default"


def _owner_reference(gateway: Gateway) -> OwnerReference:
    return OwnerReference(
        api_version=gateway.api_version,
        kind=gateway.kind,
        name=gateway.name,
        uid=gateway.uid,
        controller=True,
    )


class Deployer:
    """Renders and applies the proxy workload for Gateways."""

    def __init__(
        self,
        scheme: Scheme,
        inputs: Inputs,
        helm: Helm,
        translate_port: Callable[[int], int] = default_translate_port,
    ) -> None:
        """Initialize Deployer."""
        self._scheme = scheme
        self._inputs = inputs
        self._helm = helm
        self._translate_port = translate_port

    @classmethod
    def create(
        cls,
        inputs: Inputs,
        chart_dir: Path = CHART_DIR,
        version: str | None = None,
        scheme: Scheme | None = None,
        options: Options | None = None,
    ) -> "Deployer":
        """Create a Deployer for the chart in `chart_dir`, loading it once.

        Raises `ChartLoadException` if the chart folder is malformed.
        """
        chart = load_chart(chart_dir, version)
        return cls(scheme or default_scheme(), inputs, Helm(chart, options))

    async def get_gvks_to_watch(self) -> list[GroupVersionKind]:
        """Return the kinds of objects the chart renders, in order of first appearance.

        A placeholder Gateway without listeners is rendered. Nothing is applied.
        """
        placeholder = Gateway(name=WATCH_GATEWAY_NAME, namespace=WATCH_GATEWAY_NAMESPACE)
        with trace_context("Watched kinds"):
            objs = await self.render_chart_to_objects(placeholder)
        gvks: list[GroupVersionKind] = []
        for obj in objs:
            if (gvk := obj.gvk) not in gvks:
                gvks.append(gvk)
        return gvks

    async def render_chart_to_objects(self, gateway: Gateway) -> list[ResourceObject]:
        """Render the objects for the Gateway, all placed in its namespace."""
        vals = gateway_values(gateway, self._inputs, translate_port=self._translate_port)
        _LOGGER.info("Rendering helm chart for Gateway %s", gateway.namespaced_name)
        _LOGGER.debug("Helm values for %s: %s", gateway.namespaced_name, vals)
        objs = await self.render(gateway.name, gateway.namespace, vals)
        for obj in objs:
            obj.namespace = gateway.namespace
        return objs

    async def render(
        self, name: str, namespace: str, vals: dict[str, Any]
    ) -> list[ResourceObject]:
        """Render the chart as release `name` in `namespace` and decode the output."""
        with trace_context(f"Render {namespace}/{name}"):
            content = await self._helm.render(name, namespace, vals)
        try:
            return convert_yaml_to_objects(self._scheme, content)
        except DecodeException as err:
            raise DecodeException(
                f"Failed to convert yaml to objects for {namespace}/{name}: {err}"
            ) from err

    async def get_objs_to_deploy(self, gateway: Gateway) -> list[ResourceObject]:
        """Render the objects for the Gateway, each owned by the Gateway."""
        objs = await self.render_chart_to_objects(gateway)
        for obj in objs:
            obj.owner_references = [_owner_reference(gateway)]
            _LOGGER.debug("Object to deploy: %s", obj.named_resource)
        return objs

    async def deploy_objs(self, objs: Sequence[ResourceObject], client: Client) -> None:
        """Apply the objects in order, stopping at the first failure."""
        for obj in objs:
            with trace_context(f"Apply {obj.named_resource}"):
                try:
                    await client.apply(
                        obj.to_manifest(),
                        field_owner=self._inputs.controller_name,
                        force=True,
                    )
                except CommandException as err:
                    raise ApplyException(
                        obj.kind, obj.name, str(err), gvk=str(obj.gvk)
                    ) from err

    async def deploy(self, gateway: Gateway, client: Client) -> None:
        """Render and apply the proxy workload for the Gateway."""
        objs = await self.get_objs_to_deploy(gateway)
        await self.deploy_objs(objs, client)
        _LOGGER.info(
            "Deployed %d objects for Gateway %s", len(objs), gateway.namespaced_name
        )
