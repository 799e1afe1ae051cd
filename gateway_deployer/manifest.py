"""Representation of gateways and the cluster resources rendered for them.

A `Gateway` is the logical input read from the cluster. The objects produced by
rendering the chart are a `ResourceObject`: either one of the typed resources
known to the decoder scheme, or an `Unstructured` object holding the raw fields
of a kind that has no typed representation.
"""

from dataclasses import dataclass, field
import logging
from typing import Any

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

from .exceptions import InputException

__all__ = [
    "Gateway",
    "Listener",
    "GroupVersionKind",
    "NamedResource",
    "OwnerReference",
    "ObjectMeta",
    "TypedObject",
    "ServiceAccount",
    "ConfigMap",
    "Deployment",
    "Service",
    "HorizontalPodAutoscaler",
    "Unstructured",
    "ResourceObject",
]

_LOGGER = logging.getLogger(__name__)


GATEWAY_DOMAIN = "gateway.networking.k8s.io"
GATEWAY_KIND = "Gateway"
GATEWAY_API_VERSION = f"{GATEWAY_DOMAIN}/v1"
DEFAULT_LISTENER_PROTOCOL = "HTTP"


def _check_version(doc: dict[str, Any], version: str) -> None:
    """Assert that the resource has the specified version."""
    if not (api_version := doc.get("apiVersion")):
        raise InputException(f"Invalid object missing apiVersion: {doc}")
    if not api_version.startswith(version):
        raise InputException(f"Invalid object expected '{version}': {doc}")


@dataclass(frozen=True, order=True)
class GroupVersionKind:
    """Identifies a kind of cluster resource."""

    group: str
    """API group, empty for the core group."""

    version: str
    kind: str

    @classmethod
    def from_api_version(cls, api_version: str, kind: str) -> "GroupVersionKind":
        """Split an `apiVersion` string such as `apps/v1` into group and version."""
        group, _, version = api_version.rpartition("/")
        return cls(group=group, version=version, kind=kind)

    @property
    def api_version(self) -> str:
        """Return the `apiVersion` string for the group and version."""
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version

    def __str__(self) -> str:
        return f"{self.api_version}, Kind={self.kind}"


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a kubernetes resource."""

    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for objects parsed from user supplied documents."""

    class Config(BaseConfig):
        omit_none = True


@dataclass
class Listener(BaseManifest):
    """A port the gateway accepts traffic on."""

    name: str
    """The name of the listener, unique within the Gateway."""

    port: int
    """The network port of the listener."""

    protocol: str = DEFAULT_LISTENER_PROTOCOL
    """The application protocol of the listener."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Listener":
        """Parse a Listener from an entry of a Gateway spec.listeners."""
        if not (name := doc.get("name")):
            raise InputException(f"Invalid {cls} missing name: {doc}")
        port = doc.get("port")
        if not isinstance(port, int) or isinstance(port, bool):
            raise InputException(f"Invalid {cls} port must be an integer: {doc}")
        if not 0 < port < 65536:
            raise InputException(f"Invalid {cls} port out of range: {doc}")
        return cls(
            name=name,
            port=port,
            protocol=doc.get("protocol", DEFAULT_LISTENER_PROTOCOL),
        )


@dataclass
class Gateway(BaseManifest):
    """A representation of a Gateway API Gateway.

    This is the logical description of a proxy: its identity and the ordered
    list of listeners. It is treated as read only.
    """

    name: str
    """The name of the Gateway."""

    namespace: str
    """The namespace of the Gateway, and of every object deployed for it."""

    uid: str = ""
    """The uid assigned by the cluster, used for owner references."""

    listeners: list[Listener] = field(default_factory=list)
    """Listeners in the order they are declared."""

    kind: str = GATEWAY_KIND
    api_version: str = GATEWAY_API_VERSION

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Gateway":
        """Parse a Gateway from a kubernetes resource object."""
        _check_version(doc, GATEWAY_DOMAIN)
        if doc.get("kind") != GATEWAY_KIND:
            raise InputException(f"Invalid {cls} unexpected kind: {doc}")
        if not (metadata := doc.get("metadata")):
            raise InputException(f"Invalid {cls} missing metadata: {doc}")
        if not (name := metadata.get("name")):
            raise InputException(f"Invalid {cls} missing metadata.name: {doc}")
        if not (namespace := metadata.get("namespace")):
            raise InputException(f"Invalid {cls} missing metadata.namespace: {doc}")
        spec = doc.get("spec") or {}
        return cls(
            name=name,
            namespace=namespace,
            uid=metadata.get("uid", ""),
            listeners=[
                Listener.parse_doc(listener)
                for listener in spec.get("listeners") or ()
            ],
            kind=doc["kind"],
            api_version=doc["apiVersion"],
        )

    @property
    def namespaced_name(self) -> str:
        """Return the namespace and name concatenated as an id."""
        return f"{self.namespace}/{self.name}"


class KubeConfig(BaseConfig):
    """Serialization rules shared by typed cluster resources.

    Unknown fields are rejected so that a document with an unexpected shape is
    kept in its raw form rather than silently losing fields.
    """

    omit_none = True
    serialize_by_alias = True
    forbid_extra_keys = True


@dataclass
class OwnerReference(DataClassDictMixin):
    """A back-link from a dependent object to the object that created it."""

    api_version: str = field(metadata=field_options(alias="apiVersion"))
    kind: str
    name: str
    uid: str
    controller: bool | None = None
    block_owner_deletion: bool | None = field(
        default=None, metadata=field_options(alias="blockOwnerDeletion")
    )

    class Config(KubeConfig):
        pass


@dataclass
class ObjectMeta(DataClassDictMixin):
    """The subset of object metadata set by the chart and the deployer."""

    name: str
    namespace: str | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None
    owner_references: list[OwnerReference] | None = field(
        default=None, metadata=field_options(alias="ownerReferences")
    )

    class Config(KubeConfig):
        pass


@dataclass
class TypedObject(DataClassDictMixin):
    """Base class for resources with a registered typed representation."""

    api_version: str = field(metadata=field_options(alias="apiVersion"))
    kind: str
    metadata: ObjectMeta

    class Config(KubeConfig):
        pass

    @property
    def gvk(self) -> GroupVersionKind:
        return GroupVersionKind.from_api_version(self.api_version, self.kind)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str | None:
        return self.metadata.namespace

    @namespace.setter
    def namespace(self, value: str) -> None:
        self.metadata.namespace = value

    @property
    def owner_references(self) -> list[OwnerReference]:
        return list(self.metadata.owner_references or ())

    @owner_references.setter
    def owner_references(self, value: list[OwnerReference]) -> None:
        self.metadata.owner_references = list(value)

    @property
    def named_resource(self) -> NamedResource:
        return NamedResource(kind=self.kind, namespace=self.namespace, name=self.name)

    def to_manifest(self) -> dict[str, Any]:
        """Return the object as a kubernetes document."""
        return self.to_dict()


@dataclass
class ServiceAccount(TypedObject):
    """core/v1 ServiceAccount."""

    secrets: list[dict[str, Any]] | None = None
    image_pull_secrets: list[dict[str, Any]] | None = field(
        default=None, metadata=field_options(alias="imagePullSecrets")
    )
    automount_service_account_token: bool | None = field(
        default=None, metadata=field_options(alias="automountServiceAccountToken")
    )


@dataclass
class ConfigMap(TypedObject):
    """core/v1 ConfigMap."""

    data: dict[str, str] | None = None
    binary_data: dict[str, str] | None = field(
        default=None, metadata=field_options(alias="binaryData")
    )
    immutable: bool | None = None


@dataclass
class Deployment(TypedObject):
    """apps/v1 Deployment."""

    spec: dict[str, Any] = field(default_factory=dict)
    status: dict[str, Any] | None = None


@dataclass
class Service(TypedObject):
    """core/v1 Service."""

    spec: dict[str, Any] = field(default_factory=dict)
    status: dict[str, Any] | None = None


@dataclass
class HorizontalPodAutoscaler(TypedObject):
    """autoscaling/v2 HorizontalPodAutoscaler."""

    spec: dict[str, Any] = field(default_factory=dict)
    status: dict[str, Any] | None = None


@dataclass
class Unstructured:
    """A resource of a kind without a typed representation.

    The raw document is kept as is and only the fields needed by the deployer
    are interpreted.
    """

    obj: dict[str, Any]

    @property
    def kind(self) -> str:
        return str(self.obj.get("kind", ""))

    @property
    def api_version(self) -> str:
        return str(self.obj.get("apiVersion", ""))

    @property
    def gvk(self) -> GroupVersionKind:
        return GroupVersionKind.from_api_version(self.api_version, self.kind)

    @property
    def _metadata(self) -> dict[str, Any]:
        if isinstance(metadata := self.obj.get("metadata"), dict):
            return metadata
        return {}

    def _writable_metadata(self) -> dict[str, Any]:
        metadata = self.obj.setdefault("metadata", {})
        if not isinstance(metadata, dict):
            raise InputException(
                f"Invalid {self.kind} metadata is not a mapping: {metadata}"
            )
        return metadata

    @property
    def name(self) -> str:
        return str(self._metadata.get("name", ""))

    @property
    def namespace(self) -> str | None:
        return self._metadata.get("namespace")

    @namespace.setter
    def namespace(self, value: str) -> None:
        self._writable_metadata()["namespace"] = value

    @property
    def owner_references(self) -> list[OwnerReference]:
        return [
            OwnerReference.from_dict(ref)
            for ref in self._metadata.get("ownerReferences") or ()
        ]

    @owner_references.setter
    def owner_references(self, value: list[OwnerReference]) -> None:
        self._writable_metadata()["ownerReferences"] = [ref.to_dict() for ref in value]

    @property
    def named_resource(self) -> NamedResource:
        return NamedResource(kind=self.kind, namespace=self.namespace, name=self.name)

    def to_manifest(self) -> dict[str, Any]:
        """Return the object as a kubernetes document."""
        return self.obj


ResourceObject = TypedObject | Unstructured
"""An object rendered from the chart, typed when the scheme knows its kind."""
