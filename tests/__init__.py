"""Tests for gateway-deployer."""
