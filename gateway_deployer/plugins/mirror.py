"""Translates HTTPRoute request mirror filters into traffic shadowing."""

import logging
from typing import Any

from . import RouteContext, RoutePlugin, route_options, rule_filters
from ..query import GatewayQueries

__all__ = ["MirrorPlugin"]

_LOGGER = logging.getLogger(__name__)

MIRROR_FILTER = "RequestMirror"


class MirrorPlugin(RoutePlugin):
    """Shadows requests to the backend named by a RequestMirror filter."""

    def __init__(self, queries: GatewayQueries) -> None:
        """Initialize MirrorPlugin."""
        self._queries = queries

    def apply_route_plugin(
        self, context: RouteContext, output_route: dict[str, Any]
    ) -> None:
        filters = rule_filters(context.rule, MIRROR_FILTER)
        if not filters:
            return
        # Only a single shadow destination is supported per route
        config = filters[0].get("requestMirror") or {}
        if not (ref := config.get("backendRef")):
            context.reports.append(f"{MIRROR_FILTER} filter missing backendRef")
            return
        if (backend := self._queries.get_backend_for_ref(context.namespace, ref)) is None:
            _LOGGER.debug("Mirror backend %s not found for %s", ref, context.name)
            context.reports.append(f"{MIRROR_FILTER} backend {ref.get('name')} not found")
            return
        metadata = backend.get("metadata") or {}
        upstream = f"{metadata.get('namespace')}-{metadata.get('name')}"
        if port := ref.get("port"):
            upstream = f"{upstream}-{port}"
        route_options(output_route)["shadowing"] = {
            "upstream": {
                "name": upstream,
                "namespace": metadata.get("namespace"),
            },
            "percentage": 100,
        }
