"""
gateway-deployer materializes the workload resources that run a gateway proxy.

A `Gateway` is turned into a set of helm values, the embedded chart is rendered
against those values, and the resulting objects are stamped with namespace and
ownership before being applied to the cluster with server side apply.

```python
from gateway_deployer.config import Inputs
from gateway_deployer.deployer import Deployer

deployer = Deployer.create(Inputs(controller_name="solo.io/gloo-gateway"))
objs = await deployer.get_objs_to_deploy(gateway)
```
"""

__all__ = [
    "client",
    "config",
    "decoder",
    "deployer",
    "exceptions",
    "helm",
    "manifest",
    "plugins",
    "values",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
