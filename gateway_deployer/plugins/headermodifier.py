"""Translates HTTPRoute header modifier filters."""

from typing import Any

from . import RouteContext, RoutePlugin, route_options, rule_filters

__all__ = ["HeaderModifierPlugin"]

REQUEST_FILTER = "RequestHeaderModifier"
RESPONSE_FILTER = "ResponseHeaderModifier"


def _header_manipulation(config: dict[str, Any]) -> tuple[list[dict[str, Any]], list[str]]:
    """Return the headers to add and the header names to remove."""
    to_add = [
        {"header": {"key": header["name"], "value": header["value"]}, "append": False}
        for header in config.get("set") or ()
    ]
    to_add.extend(
        {"header": {"key": header["name"], "value": header["value"]}, "append": True}
        for header in config.get("add") or ()
    )
    return to_add, list(config.get("remove") or ())


class HeaderModifierPlugin(RoutePlugin):
    """Adds request and response header manipulation to the route options."""

    def apply_route_plugin(
        self, context: RouteContext, output_route: dict[str, Any]
    ) -> None:
        for phase, filter_type, config_key in (
            ("request", REQUEST_FILTER, "requestHeaderModifier"),
            ("response", RESPONSE_FILTER, "responseHeaderModifier"),
        ):
            for route_filter in rule_filters(context.rule, filter_type):
                if not (config := route_filter.get(config_key)):
                    context.reports.append(f"{filter_type} filter missing {config_key}")
                    continue
                to_add, to_remove = _header_manipulation(config)
                manipulation = route_options(output_route).setdefault(
                    "headerManipulation", {}
                )
                if to_add:
                    manipulation.setdefault(f"{phase}HeadersToAdd", []).extend(to_add)
                if to_remove:
                    manipulation.setdefault(f"{phase}HeadersToRemove", []).extend(
                        to_remove
                    )
