"""Entry point for running gateway-deployer as a module."""

from gateway_deployer.tool import gateway_deployer


if __name__ == "__main__":
    gateway_deployer.main()
