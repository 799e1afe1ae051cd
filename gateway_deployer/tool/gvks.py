"""gateway-deployer gvks action."""

from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
import logging
from typing import Any, cast

from .format import PrintFormatter
from . import selector

_LOGGER = logging.getLogger(__name__)


class GvksAction:
    """gateway-deployer gvks action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "gvks",
                help="List the kinds of objects the chart can render",
                description="""Print every group, version and kind the proxy
                    chart renders, which a controller needs to watch.""",
            ),
        )
        selector.add_deployer_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(
        self,
        **kwargs: Any,
    ) -> None:
        """Async Action implementation."""
        deployer = selector.build_deployer(**kwargs)
        gvks = await deployer.get_gvks_to_watch()
        PrintFormatter(["group", "version", "kind"]).print(
            [
                {"group": gvk.group or "core", "version": gvk.version, "kind": gvk.kind}
                for gvk in gvks
            ]
        )
