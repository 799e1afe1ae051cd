"""Test helpers for gateway-deployer tools."""

import sys

from gateway_deployer.command import Command, run

GATEWAY_DEPLOYER_CMD = [sys.executable, "-m", "gateway_deployer"]


async def run_command(args: list[str], env: dict[str, str] | None = None) -> str:
    return await run(Command(GATEWAY_DEPLOYER_CMD + args, env=env))
