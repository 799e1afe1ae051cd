"""Extension points for the route translation.

A plugin declares which of the closed set of `Capability` values it
implements. Subclassing `RoutePlugin` or `PostTranslationPlugin` adds the
capability together with its hook, and a plugin may subclass both:

```python
class MyPlugin(RoutePlugin, PostTranslationPlugin):
    def apply_route_plugin(self, context, output_route): ...
    def apply_post_translation_plugin(self, context): ...

assert MyPlugin.capabilities == {Capability.ROUTE, Capability.POST_TRANSLATION}
```

Routes and proxies are plain documents; plugins edit them in place.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar

__all__ = [
    "Capability",
    "Plugin",
    "RoutePlugin",
    "PostTranslationPlugin",
    "RouteContext",
    "PostTranslationContext",
    "route_options",
    "rule_filters",
]


class Capability(StrEnum):
    """A phase of the translation a plugin can take part in."""

    ROUTE = "route"
    POST_TRANSLATION = "post-translation"


HOOKS = {
    Capability.ROUTE: "apply_route_plugin",
    Capability.POST_TRANSLATION: "apply_post_translation_plugin",
}
"""The method a plugin with each capability is called through."""


@dataclass
class RouteContext:
    """The source of a route being translated."""

    route: dict[str, Any]
    """The HTTPRoute object."""

    rule: dict[str, Any]
    """The rule of the HTTPRoute the output route is built from."""

    reports: list[str] = field(default_factory=list)
    """Problems found while translating, surfaced on the HTTPRoute status."""

    @property
    def namespace(self) -> str:
        return str(self.route.get("metadata", {}).get("namespace", ""))

    @property
    def name(self) -> str:
        return str(self.route.get("metadata", {}).get("name", ""))


@dataclass
class PostTranslationContext:
    """The fully translated proxy."""

    proxy: dict[str, Any]

    @property
    def routes(self) -> list[dict[str, Any]]:
        """All routes of all virtual hosts of the proxy."""
        return [
            route
            for listener in self.proxy.get("listeners") or ()
            for virtual_host in listener.get("virtualHosts") or ()
            for route in virtual_host.get("routes") or ()
        ]


class Plugin(ABC):
    """Base class for all plugins."""

    capabilities: ClassVar[frozenset[Capability]] = frozenset()
    """Capabilities implemented, collected from every base class."""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        capabilities: set[Capability] = set(cls.__dict__.get("capabilities", ()))
        for base in cls.__mro__[1:]:
            capabilities.update(getattr(base, "capabilities", ()))
        for capability in capabilities:
            if not callable(getattr(cls, hook := HOOKS[capability], None)):
                raise TypeError(
                    f"{cls.__name__} has capability '{capability}' but no {hook}"
                )
        cls.capabilities = frozenset(capabilities)

    def implements(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RoutePlugin(Plugin):
    """A plugin that runs once for each route being translated."""

    capabilities = frozenset({Capability.ROUTE})

    @abstractmethod
    def apply_route_plugin(
        self, context: RouteContext, output_route: dict[str, Any]
    ) -> None:
        """Update the output route built from `context.rule`."""


class PostTranslationPlugin(Plugin):
    """A plugin that runs once the whole proxy has been translated."""

    capabilities = frozenset({Capability.POST_TRANSLATION})

    @abstractmethod
    def apply_post_translation_plugin(self, context: PostTranslationContext) -> None:
        """Update the translated proxy."""


def rule_filters(rule: dict[str, Any], filter_type: str) -> list[dict[str, Any]]:
    """Return the filters of the given type from an HTTPRoute rule."""
    return [
        route_filter
        for route_filter in rule.get("filters") or ()
        if route_filter.get("type") == filter_type
    ]


def route_options(output_route: dict[str, Any]) -> dict[str, Any]:
    """Return the options of the output route, creating them if needed."""
    options: dict[str, Any] = output_route.setdefault("options", {})
    return options
