"""Scripted transport exposing deterministic fixtures for tests."""

from .client import MockTransport, ScriptedStream, load_fixture_catalog

__all__ = ["MockTransport", "ScriptedStream", "load_fixture_catalog"]
