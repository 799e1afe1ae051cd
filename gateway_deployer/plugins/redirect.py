"""Translates HTTPRoute request redirect filters."""

from typing import Any

from . import RouteContext, RoutePlugin, rule_filters

__all__ = ["RedirectPlugin"]

REDIRECT_FILTER = "RequestRedirect"

RESPONSE_CODES = {
    301: "MOVED_PERMANENTLY",
    302: "FOUND",
    303: "SEE_OTHER",
    307: "TEMPORARY_REDIRECT",
    308: "PERMANENT_REDIRECT",
}
DEFAULT_STATUS_CODE = 302


class RedirectPlugin(RoutePlugin):
    """Replaces the route action with a redirect action."""

    def apply_route_plugin(
        self, context: RouteContext, output_route: dict[str, Any]
    ) -> None:
        filters = rule_filters(context.rule, REDIRECT_FILTER)
        if not filters:
            return
        config = filters[0].get("requestRedirect") or {}
        status_code = config.get("statusCode", DEFAULT_STATUS_CODE)
        if status_code not in RESPONSE_CODES:
            context.reports.append(f"Unsupported redirect status code {status_code}")
            return
        action: dict[str, Any] = {"responseCode": RESPONSE_CODES[status_code]}
        if hostname := config.get("hostname"):
            action["hostRedirect"] = hostname
        if port := config.get("port"):
            action["portRedirect"] = port
        if config.get("scheme") == "https":
            action["httpsRedirect"] = True
        if path := config.get("path"):
            if path.get("type") == "ReplaceFullPath":
                action["pathRedirect"] = path.get("replaceFullPath", "")
            elif path.get("type") == "ReplacePrefixMatch":
                action["prefixRewrite"] = path.get("replacePrefixMatch", "")
            else:
                context.reports.append(f"Unsupported redirect path type {path.get('type')}")
                return
        output_route.pop("routeAction", None)
        output_route["redirectAction"] = action
