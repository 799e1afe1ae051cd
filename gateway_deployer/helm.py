"""Library for rendering the proxy chart with `helm template`.

The chart is loaded into memory once at startup with `load_chart` and is never
modified afterwards. Every call to `Helm.render` writes the chart and values to
a private temporary directory, with helm's own config, cache and data homes
pointed inside it, so no release state is shared or kept between renders.

```python
from gateway_deployer.helm import Helm, load_chart

helm = Helm(load_chart(CHART_DIR))
manifest = await helm.render("gw", "default", {"gateway": {"enabled": True}})
```
"""

from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
import logging
from pathlib import Path, PurePosixPath
import tempfile
from typing import Any

import aiofiles
import aiofiles.os
import yaml

from . import command
from .exceptions import ChartLoadException, CommandException, RenderException

__all__ = [
    "Chart",
    "ChartFile",
    "Helm",
    "Options",
    "load_chart",
    "CHART_DIR",
]

_LOGGER = logging.getLogger(__name__)


HELM_BIN = "helm"
CHART_METADATA = "Chart.yaml"

CHART_DIR = Path(__file__).parent / "charts"
"""Directory holding the chart embedded in this package."""


@dataclass(frozen=True)
class ChartFile:
    """A file of the chart, relative to the chart root."""

    name: str
    data: bytes


@dataclass(frozen=True)
class Chart:
    """An immutable, in memory copy of a helm chart."""

    name: str
    """Name of the chart directory."""

    metadata: tuple[tuple[str, Any], ...]
    """Contents of Chart.yaml."""

    files: tuple[ChartFile, ...]

    @property
    def version(self) -> str | None:
        return dict(self.metadata).get("version")

    @property
    def app_version(self) -> str | None:
        return dict(self.metadata).get("appVersion")

    async def write(self, path: Path) -> Path:
        """Write the chart below `path` and return the chart directory."""
        chart_dir = path / self.name
        for chart_file in self.files:
            target = chart_dir.joinpath(*PurePosixPath(chart_file.name).parts)
            await aiofiles.os.makedirs(target.parent, exist_ok=True)
            async with aiofiles.open(target, mode="wb") as out:
                await out.write(chart_file.data)
        return chart_dir


def _read_metadata(chart_root: Path, data: bytes) -> dict[str, Any]:
    try:
        metadata = yaml.safe_load(data)
    except yaml.YAMLError as err:
        raise ChartLoadException(
            f"Unable to parse {CHART_METADATA} in {chart_root}: {err}"
        ) from err
    if not isinstance(metadata, dict) or not metadata.get("name"):
        raise ChartLoadException(f"Invalid {CHART_METADATA} in {chart_root}")
    return metadata


def load_chart(root: Path, version: str | None = None) -> Chart:
    """Load the chart stored as the only entry of the `root` directory.

    When a version is supplied it replaces both the chart version and the app
    version, which is what packaging the chart for a release does.
    """
    if not root.is_dir():
        raise ChartLoadException(f"Chart folder {root} does not exist")
    entries = sorted(root.iterdir())
    if len(entries) != 1:
        raise ChartLoadException(
            f"Expected exactly one entry in the chart folder {root}, got "
            f"{[entry.name for entry in entries]}"
        )
    chart_root = entries[0]
    if not chart_root.is_dir():
        raise ChartLoadException(f"Expected chart directory, got file {chart_root}")

    files: list[ChartFile] = []
    metadata: dict[str, Any] | None = None
    for path in sorted(chart_root.rglob("*")):
        if not path.is_file():
            continue
        relative_path = path.relative_to(chart_root).as_posix()
        data = path.read_bytes()
        if relative_path == CHART_METADATA:
            metadata = _read_metadata(chart_root, data)
            continue
        files.append(ChartFile(name=relative_path, data=data))
    if metadata is None:
        raise ChartLoadException(f"Chart {chart_root} is missing {CHART_METADATA}")

    if version is not None:
        metadata["version"] = version
        metadata["appVersion"] = version
    files.insert(
        0,
        ChartFile(
            name=CHART_METADATA,
            data=yaml.dump(metadata, sort_keys=False).encode("utf-8"),
        ),
    )
    _LOGGER.debug(
        "Loaded chart %s version %s (%d files)",
        metadata["name"],
        metadata.get("version"),
        len(files),
    )
    return Chart(
        name=chart_root.name,
        metadata=tuple(metadata.items()),
        files=tuple(files),
    )


@contextmanager
def render_context() -> Generator[Path, None, None]:
    """Acquire a private scratch directory for a single render."""
    with tempfile.TemporaryDirectory(prefix="gateway-deployer-") as tmp_dir:
        yield Path(tmp_dir)


def _isolated_env(tmp_dir: Path) -> dict[str, str]:
    """Point every helm state directory inside the render directory."""
    return {
        "HELM_CACHE_HOME": str(tmp_dir / "cache"),
        "HELM_CONFIG_HOME": str(tmp_dir / "config"),
        "HELM_DATA_HOME": str(tmp_dir / "data"),
    }


@dataclass(frozen=True)
class Options:
    """Options to use when rendering the chart."""

    skip_tests: bool = True
    """Don't render helm test hooks."""

    kube_version: str | None = None
    """Value of the helm --kube-version flag."""

    api_versions: list[str] | None = None
    """Values of the helm --api-versions flag."""

    timeout: float | None = command.DEFAULT_TIMEOUT
    """Maximum time in seconds a single render may take."""

    @property
    def template_args(self) -> list[str]:
        """Helm template CLI arguments built from the options."""
        args = []
        if self.skip_tests:
            args.append("--skip-tests")
        if self.kube_version:
            args.extend(["--kube-version", self.kube_version])
        for api_version in self.api_versions or ():
            args.extend(["--api-versions", api_version])
        return args


class Helm:
    """Renders a chart against a set of values."""

    def __init__(self, chart: Chart, options: Options | None = None) -> None:
        """Initialize Helm."""
        self._chart = chart
        self._options = options or Options()

    async def render(self, name: str, namespace: str, values: dict[str, Any]) -> str:
        """Render the chart as release `name` in `namespace`, returning the manifest."""
        target = f"{namespace}/{name}"
        with render_context() as tmp_dir:
            chart_path = await self._chart.write(tmp_dir)
            values_path = tmp_dir / "values.yaml"
            async with aiofiles.open(values_path, mode="w") as values_file:
                await values_file.write(yaml.dump(values, sort_keys=False))
            args = [
                HELM_BIN,
                "template",
                name,
                str(chart_path),
                "--namespace",
                namespace,
                "--values",
                str(values_path),
            ]
            args.extend(self._options.template_args)
            cmd = command.Command(args, env=_isolated_env(tmp_dir))
            try:
                return await command.run(cmd, timeout=self._options.timeout)
            except CommandException as err:
                raise RenderException(target, str(err)) from err
