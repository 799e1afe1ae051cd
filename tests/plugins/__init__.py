"""Tests for the route translation plugins."""
