"""Attaches RouteOption objects targeting an HTTPRoute to its routes."""

import logging
from typing import Any

from . import (
    PostTranslationContext,
    PostTranslationPlugin,
    RouteContext,
    RoutePlugin,
    route_options,
)
from ..query import GatewayQueries

__all__ = ["RouteOptionsPlugin"]

_LOGGER = logging.getLogger(__name__)

SOURCES_KEY = "sources"
PROXY_SOURCES_KEY = "routeOptionSources"


class RouteOptionsPlugin(RoutePlugin, PostTranslationPlugin):
    """Merges RouteOption objects into the route options.

    Options already set by filters on the rule take precedence, and an older
    RouteOption takes precedence over a newer one. Once the proxy is translated
    the attached RouteOptions are listed on the proxy metadata.
    """

    def __init__(self, queries: GatewayQueries) -> None:
        """Initialize RouteOptionsPlugin."""
        self._queries = queries

    def apply_route_plugin(
        self, context: RouteContext, output_route: dict[str, Any]
    ) -> None:
        attached = self._queries.get_route_options_for_route(context.route)
        if not attached:
            return
        options = route_options(output_route)
        sources = output_route.setdefault("metadataStatic", {}).setdefault(
            SOURCES_KEY, []
        )
        for route_option in attached:
            metadata = route_option.get("metadata") or {}
            for key, value in ((route_option.get("spec") or {}).get("options") or {}).items():
                options.setdefault(key, value)
            sources.append(
                {
                    "resourceKind": route_option.get("kind"),
                    "resourceRef": {
                        "name": metadata.get("name"),
                        "namespace": metadata.get("namespace"),
                    },
                }
            )
        _LOGGER.debug(
            "Attached %d RouteOptions to route of %s", len(attached), context.name
        )

    def apply_post_translation_plugin(self, context: PostTranslationContext) -> None:
        refs: list[dict[str, Any]] = []
        for route in context.routes:
            for source in (route.get("metadataStatic") or {}).get(SOURCES_KEY) or ():
                if (ref := source.get("resourceRef")) not in refs:
                    refs.append(ref)
        if refs:
            context.proxy.setdefault("metadata", {})[PROXY_SOURCES_KEY] = refs
