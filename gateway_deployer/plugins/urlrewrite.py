"""Translates HTTPRoute URL rewrite filters."""

from typing import Any

from . import RouteContext, RoutePlugin, route_options, rule_filters

__all__ = ["UrlRewritePlugin"]

URL_REWRITE_FILTER = "URLRewrite"


class UrlRewritePlugin(RoutePlugin):
    """Rewrites the host and path of forwarded requests."""

    def apply_route_plugin(
        self, context: RouteContext, output_route: dict[str, Any]
    ) -> None:
        filters = rule_filters(context.rule, URL_REWRITE_FILTER)
        if not filters:
            return
        config = filters[0].get("urlRewrite") or {}
        options = route_options(output_route)
        if hostname := config.get("hostname"):
            options["hostRewrite"] = hostname
        if not (path := config.get("path")):
            return
        match_type = path.get("type")
        if match_type == "ReplacePrefixMatch":
            options["prefixRewrite"] = path.get("replacePrefixMatch", "")
        elif match_type == "ReplaceFullPath":
            options["regexRewrite"] = {
                "pattern": {"regex": ".*"},
                "substitution": path.get("replaceFullPath", ""),
            }
        else:
            context.reports.append(f"Unsupported URL rewrite path type {match_type}")
