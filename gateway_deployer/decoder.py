"""Library for decoding rendered manifests into resource objects.

Every document is first read generically to recover its kind, then converted to
the typed representation registered in the `Scheme`. A document whose kind is
not registered, or that does not fit the typed representation, is kept as an
`Unstructured` object so nothing rendered is ever dropped for being unknown.
"""

from collections.abc import Iterable, Mapping
import logging
from typing import Any

from mashumaro.exceptions import ExtraKeysError, InvalidFieldValue, MissingField
import yaml

from .exceptions import DecodeException
from .manifest import (
    ConfigMap,
    Deployment,
    GroupVersionKind,
    HorizontalPodAutoscaler,
    ResourceObject,
    Service,
    ServiceAccount,
    TypedObject,
    Unstructured,
)

__all__ = [
    "Scheme",
    "default_scheme",
    "convert_yaml_to_objects",
]

_LOGGER = logging.getLogger(__name__)


class Scheme:
    """Maps kinds of resources to their typed representation."""

    def __init__(
        self, types: Mapping[GroupVersionKind, type[TypedObject]] | None = None
    ) -> None:
        """Initialize Scheme."""
        self._types: dict[GroupVersionKind, type[TypedObject]] = dict(types or {})

    def add_known_type(self, gvk: GroupVersionKind, cls: type[TypedObject]) -> None:
        """Register the typed representation for a kind."""
        self._types[gvk] = cls

    def new(self, gvk: GroupVersionKind) -> type[TypedObject] | None:
        """Return the typed representation for the kind, if registered."""
        return self._types.get(gvk)

    @property
    def known_kinds(self) -> Iterable[GroupVersionKind]:
        return iter(self._types)

    def convert(self, obj: Unstructured) -> ResourceObject:
        """Return the typed form of the object, or the object itself."""
        if (cls := self.new(obj.gvk)) is None:
            return obj
        try:
            return cls.from_dict(obj.obj)
        except (MissingField, InvalidFieldValue, ExtraKeysError, ValueError) as err:
            _LOGGER.debug(
                "Keeping %s %s unstructured: %s", obj.gvk, obj.name, err
            )
            return obj


def default_scheme() -> Scheme:
    """Return a scheme with the kinds the proxy chart renders."""
    return Scheme(
        {
            GroupVersionKind("", "v1", "ServiceAccount"): ServiceAccount,
            GroupVersionKind("", "v1", "ConfigMap"): ConfigMap,
            GroupVersionKind("", "v1", "Service"): Service,
            GroupVersionKind("apps", "v1", "Deployment"): Deployment,
            GroupVersionKind(
                "autoscaling", "v2", "HorizontalPodAutoscaler"
            ): HorizontalPodAutoscaler,
        }
    )


def _generic_docs(content: str) -> list[Unstructured]:
    """Split the manifest into documents, dropping empty ones."""
    docs: list[Unstructured] = []
    try:
        for index, doc in enumerate(yaml.safe_load_all(content)):
            if not doc:
                continue
            if not isinstance(doc, dict):
                raise DecodeException(
                    f"Invalid document {index} in manifest, expected a mapping: {doc}"
                )
            if not doc.get("kind") or not doc.get("apiVersion"):
                raise DecodeException(
                    f"Invalid document {index} in manifest missing kind or apiVersion: {doc}"
                )
            if not isinstance(metadata := doc.get("metadata"), dict):
                raise DecodeException(
                    f"Invalid document {index} in manifest, metadata is not a mapping: {doc}"
                )
            if not metadata.get("name"):
                raise DecodeException(
                    f"Invalid document {index} in manifest missing metadata.name: {doc}"
                )
            docs.append(Unstructured(doc))
    except yaml.YAMLError as err:
        raise DecodeException(f"Unable to decode manifest: {err}") from err
    return docs


def convert_yaml_to_objects(scheme: Scheme, content: str) -> list[ResourceObject]:
    """Decode a multi document manifest into objects in document order.

    A malformed document fails the whole call and no objects are returned.
    """
    return [scheme.convert(doc) for doc in _generic_docs(content)]
