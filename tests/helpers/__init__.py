"""Test helper utilities for updatecore tests."""

from .fixture_crawler import FailingRunner, FixtureRunner, load_fixture_manifests, manifest_bytes

__all__ = ["FixtureRunner", "FailingRunner", "load_fixture_manifests", "manifest_bytes"]
