"""Registry of the plugins used by the route translation.

Plugins either run during the translation of each HTTPRoute rule into a proxy
route, or after the whole proxy has been translated. The order plugins are
registered in is the order they run in.
"""

from collections.abc import Iterable
import logging
from typing import cast

from . import Capability, Plugin, PostTranslationPlugin, RoutePlugin
from .headermodifier import HeaderModifierPlugin
from .mirror import MirrorPlugin
from .redirect import RedirectPlugin
from .routeoptions import RouteOptionsPlugin
from .urlrewrite import UrlRewritePlugin
from ..query import GatewayQueries

__all__ = [
    "PluginRegistry",
    "build_plugins",
    "new_plugin_registry",
]

_LOGGER = logging.getLogger(__name__)


class PluginRegistry:
    """Plugins grouped by capability, each group in registration order.

    A plugin with more than one capability is a member of every matching group.
    """

    def __init__(self, all_plugins: Iterable[Plugin]) -> None:
        """Initialize PluginRegistry."""
        route_plugins: list[RoutePlugin] = []
        post_translation_plugins: list[PostTranslationPlugin] = []
        for plugin in all_plugins:
            if plugin.implements(Capability.ROUTE):
                route_plugins.append(cast(RoutePlugin, plugin))
            if plugin.implements(Capability.POST_TRANSLATION):
                post_translation_plugins.append(cast(PostTranslationPlugin, plugin))
        self._route_plugins = tuple(route_plugins)
        self._post_translation_plugins = tuple(post_translation_plugins)
        _LOGGER.debug(
            "Registered %d route plugins, %d post translation plugins",
            len(self._route_plugins),
            len(self._post_translation_plugins),
        )

    @property
    def route_plugins(self) -> tuple[RoutePlugin, ...]:
        return self._route_plugins

    @property
    def post_translation_plugins(self) -> tuple[PostTranslationPlugin, ...]:
        return self._post_translation_plugins


def build_plugins(queries: GatewayQueries) -> list[Plugin]:
    """Return the full set of plugins to be registered.

    New plugins should be appended to this list. Moving an existing plugin
    changes the order plugins see each other's output in.
    """
    return [
        HeaderModifierPlugin(),
        MirrorPlugin(queries),
        RedirectPlugin(),
        RouteOptionsPlugin(queries),
        UrlRewritePlugin(),
    ]


def new_plugin_registry(queries: GatewayQueries) -> PluginRegistry:
    """Return a registry of the plugins built with `build_plugins`."""
    return PluginRegistry(build_plugins(queries))
