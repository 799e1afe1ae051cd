"""gateway-deployer render action."""

from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
import logging
import pathlib
from typing import Any, cast

from .format import YamlFormatter
from . import selector

_LOGGER = logging.getLogger(__name__)


class RenderAction:
    """gateway-deployer render action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "render",
                help="Render the objects deployed for a Gateway",
                description="""Render the proxy chart for a Gateway and print
                    the objects that would be applied, including namespace
                    and owner references.""",
            ),
        )
        selector.add_gateway_flags(args)
        selector.add_deployer_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(
        self,
        gateway: pathlib.Path,
        **kwargs: Any,
    ) -> None:
        """Async Action implementation."""
        deployer = selector.build_deployer(**kwargs)
        gw = await selector.read_gateway(gateway)
        objs = await deployer.get_objs_to_deploy(gw)
        YamlFormatter().print([obj.to_manifest() for obj in objs])
