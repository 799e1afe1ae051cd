"""Flags shared by the gateway-deployer commands."""

from argparse import ArgumentParser, BooleanOptionalAction
import pathlib
from typing import Any

import aiofiles
import yaml

from gateway_deployer.config import DEFAULT_XDS_PORT, Inputs, IstioValues
from gateway_deployer.deployer import Deployer
from gateway_deployer.exceptions import InputException
from gateway_deployer.helm import CHART_DIR, Options
from gateway_deployer.manifest import Gateway

DEFAULT_CONTROLLER_NAME = "solo.io/gloo-gateway"


def add_deployer_flags(args: ArgumentParser) -> None:
    """Add flags used to build the deployer Inputs."""
    args.add_argument(
        "--controller-name",
        type=str,
        default=DEFAULT_CONTROLLER_NAME,
        help="Controller name, used as the field manager when applying objects",
    )
    args.add_argument(
        "--dev",
        type=bool,
        action=BooleanOptionalAction,
        default=False,
        help="Render the proxy in develop mode",
    )
    args.add_argument(
        "--xds-port",
        type=int,
        default=DEFAULT_XDS_PORT,
        help="Port the control plane xDS server listens on",
    )
    args.add_argument(
        "--sds",
        type=bool,
        action=BooleanOptionalAction,
        default=False,
        help="Run the Istio SDS sidecar in the proxy",
    )
    args.add_argument(
        "--chart-dir",
        type=pathlib.Path,
        default=CHART_DIR,
        help="Directory containing the chart to render as its only entry",
    )
    args.add_argument(
        "--kube-version",
        type=str,
        default=None,
        help="Kubernetes version used for helm Capabilities.KubeVersion",
    )
    args.add_argument(
        "--api-versions",
        "-a",
        type=str,
        action="append",
        default=None,
        help=(
            "Kubernetes api version used for helm Capabilities.APIVersions, "
            "may be repeated"
        ),
    )


def add_gateway_flags(args: ArgumentParser) -> None:
    """Add flags for reading a Gateway."""
    args.add_argument(
        "gateway",
        type=pathlib.Path,
        help="Path to a yaml file containing a Gateway",
    )


def build_inputs(
    controller_name: str,
    dev: bool,
    xds_port: int,
    sds: bool,
    **kwargs: Any,  # pylint: disable=unused-argument
) -> Inputs:
    """Build the deployer Inputs from command line flags."""
    return Inputs(
        controller_name=controller_name,
        dev=dev,
        port=xds_port,
        istio_values=IstioValues(sds_enabled=sds),
    )


def build_helm_options(**kwargs: Any) -> Options:
    """Build the helm Options from command line flags."""
    return Options(
        kube_version=kwargs.get("kube_version"),
        api_versions=kwargs.get("api_versions"),
    )


def build_deployer(chart_dir: pathlib.Path, **kwargs: Any) -> Deployer:
    """Build a Deployer from command line flags."""
    return Deployer.create(
        build_inputs(**kwargs),
        chart_dir=chart_dir,
        options=build_helm_options(**kwargs),
    )


async def read_gateway(path: pathlib.Path) -> Gateway:
    """Read a Gateway from a yaml file."""
    try:
        async with aiofiles.open(str(path)) as gateway_file:
            content = await gateway_file.read()
    except OSError as err:
        raise InputException(f"Unable to read Gateway file {path}: {err}") from err
    try:
        doc = yaml.safe_load(content)
    except yaml.YAMLError as err:
        raise InputException(f"Unable to parse Gateway file {path}: {err}") from err
    if not isinstance(doc, dict):
        raise InputException(f"Expected a Gateway object in {path}")
    return Gateway.parse_doc(doc)
