"""Exceptions related to gateway-deployer."""

__all__ = [
    "DeployerException",
    "InputException",
    "CommandException",
    "ChartLoadException",
    "RenderException",
    "DecodeException",
    "ApplyException",
]


class DeployerException(Exception):
    """Generic base exception used for this library."""


class InputException(DeployerException):
    """Raised when the input objects or values are not formatted as expected."""


class CommandException(DeployerException):
    """Raised when there is a failure running a subcommand."""


class ChartLoadException(DeployerException):
    """Raised when the embedded chart does not have the expected shape."""


class RenderException(CommandException):
    """Raised when rendering the chart for a specific target fails."""

    def __init__(self, target: str, message: str) -> None:
        super().__init__(f"Failed to render helm chart for {target}: {message}")
        self.target = target


class DecodeException(DeployerException):
    """Raised when a rendered manifest contains a malformed document."""


class ApplyException(CommandException):
    """Raised when the cluster rejects an object."""

    def __init__(
        self, kind: str, name: str, message: str, gvk: str | None = None
    ) -> None:
        super().__init__(f"Failed to apply object {gvk or kind} {name}: {message}")
        self.kind = kind
        self.name = name
