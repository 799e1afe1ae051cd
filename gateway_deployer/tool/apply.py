"""gateway-deployer apply action."""

from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
import logging
import pathlib
from typing import Any, cast

from gateway_deployer.client import KubectlClient

from . import selector

_LOGGER = logging.getLogger(__name__)


class ApplyAction:
    """gateway-deployer apply action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "apply",
                help="Render and apply the objects for a Gateway",
                description="""Render the proxy chart for a Gateway and apply
                    the objects to the cluster with kubectl server side apply.""",
            ),
        )
        selector.add_gateway_flags(args)
        selector.add_deployer_flags(args)
        args.add_argument(
            "--context",
            type=str,
            default=None,
            help="The kubeconfig context to apply to",
        )
        args.add_argument(
            "--kubeconfig",
            type=str,
            default=None,
            help="Path to the kubeconfig file",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(
        self,
        gateway: pathlib.Path,
        context: str | None,
        kubeconfig: str | None,
        **kwargs: Any,
    ) -> None:
        """Async Action implementation."""
        deployer = selector.build_deployer(**kwargs)
        gw = await selector.read_gateway(gateway)
        await deployer.deploy(gw, KubectlClient(context=context, kubeconfig=kubeconfig))
        print(f"Applied proxy for Gateway {gw.namespaced_name}")
