"""Clients used to apply objects to a cluster.

Objects are applied with server side apply: the client sends the full desired
state of the fields it manages and the cluster records `field_owner` as their
manager. With `force` the apply takes ownership of fields held by other
managers instead of failing with a conflict.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any

import yaml

from . import command
from .exceptions import CommandException

__all__ = [
    "Client",
    "KubectlClient",
]

_LOGGER = logging.getLogger(__name__)

KUBECTL_BIN = "kubectl"


class Client(ABC):
    """A cluster API client able to apply objects."""

    @abstractmethod
    async def apply(
        self, obj: dict[str, Any], field_owner: str, force: bool = True
    ) -> None:
        """Apply the object with server side apply semantics.

        Raises `CommandException` when the cluster rejects the object.
        """


class KubectlClient(Client):
    """Applies objects by piping them to `kubectl apply --server-side`."""

    def __init__(
        self,
        context: str | None = None,
        kubeconfig: str | None = None,
        timeout: float | None = command.DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize KubectlClient."""
        self._flags: list[str] = []
        if kubeconfig:
            self._flags.extend(["--kubeconfig", kubeconfig])
        if context:
            self._flags.extend(["--context", context])
        self._timeout = timeout

    async def apply(
        self, obj: dict[str, Any], field_owner: str, force: bool = True
    ) -> None:
        args = [
            KUBECTL_BIN,
            *self._flags,
            "apply",
            "--server-side",
            f"--field-manager={field_owner}",
            "--output=name",
            "-f",
            "-",
        ]
        if force:
            args.append("--force-conflicts")
        content = yaml.dump(obj, sort_keys=False).encode("utf-8")
        out = await command.run(
            command.Command(args, exc=CommandException),
            stdin=content,
            timeout=self._timeout,
        )
        _LOGGER.debug("Applied %s", out.strip())
