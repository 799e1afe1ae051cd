"""Queries over cluster objects used by the translation plugins."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
import logging
from typing import Any

__all__ = [
    "GatewayQueries",
    "InMemoryGatewayQueries",
]

_LOGGER = logging.getLogger(__name__)

HTTP_ROUTE_KIND = "HTTPRoute"
SERVICE_KIND = "Service"
REFERENCE_GRANT_KIND = "ReferenceGrant"
ROUTE_OPTION_KIND = "RouteOption"


def _metadata(obj: dict[str, Any]) -> dict[str, Any]:
    metadata: dict[str, Any] = obj.get("metadata") or {}
    return metadata


class GatewayQueries(ABC):
    """Lookups of objects related to a route."""

    @abstractmethod
    def get_backend_for_ref(
        self, from_namespace: str, ref: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Return the backend object a route in `from_namespace` refers to.

        Returns None when the object does not exist or the reference crosses
        namespaces without a ReferenceGrant allowing it.
        """

    @abstractmethod
    def get_route_options_for_route(self, route: dict[str, Any]) -> list[dict[str, Any]]:
        """Return the RouteOption objects targeting the route, oldest first."""


class InMemoryGatewayQueries(GatewayQueries):
    """Queries backed by a fixed list of raw objects."""

    def __init__(self, objects: Iterable[dict[str, Any]] = ()) -> None:
        """Initialize InMemoryGatewayQueries."""
        self._objects = list(objects)

    def _find(self, kind: str, namespace: str, name: str) -> dict[str, Any] | None:
        for obj in self._objects:
            metadata = _metadata(obj)
            if (
                obj.get("kind") == kind
                and metadata.get("namespace") == namespace
                and metadata.get("name") == name
            ):
                return obj
        return None

    def _reference_granted(
        self, from_namespace: str, to_namespace: str, to_kind: str, to_name: str
    ) -> bool:
        for grant in self._objects:
            if grant.get("kind") != REFERENCE_GRANT_KIND:
                continue
            if _metadata(grant).get("namespace") != to_namespace:
                continue
            spec = grant.get("spec") or {}
            allowed_from = any(
                entry.get("kind") == HTTP_ROUTE_KIND
                and entry.get("namespace") == from_namespace
                for entry in spec.get("from") or ()
            )
            allowed_to = any(
                entry.get("kind") == to_kind
                and entry.get("name", to_name) == to_name
                for entry in spec.get("to") or ()
            )
            if allowed_from and allowed_to:
                return True
        return False

    def get_backend_for_ref(
        self, from_namespace: str, ref: dict[str, Any]
    ) -> dict[str, Any] | None:
        kind = ref.get("kind", SERVICE_KIND)
        name = ref.get("name", "")
        namespace = ref.get("namespace", from_namespace)
        if namespace != from_namespace and not self._reference_granted(
            from_namespace, namespace, kind, name
        ):
            _LOGGER.debug(
                "Reference from %s to %s %s/%s not granted",
                from_namespace,
                kind,
                namespace,
                name,
            )
            return None
        return self._find(kind, namespace, name)

    def get_route_options_for_route(self, route: dict[str, Any]) -> list[dict[str, Any]]:
        metadata = _metadata(route)
        matches = []
        for obj in self._objects:
            if obj.get("kind") != ROUTE_OPTION_KIND:
                continue
            if _metadata(obj).get("namespace") != metadata.get("namespace"):
                continue
            target = (obj.get("spec") or {}).get("targetRef") or {}
            if (
                target.get("kind") == HTTP_ROUTE_KIND
                and target.get("name") == metadata.get("name")
            ):
                matches.append(obj)
        matches.sort(key=lambda obj: str(_metadata(obj).get("creationTimestamp", "")))
        return matches
