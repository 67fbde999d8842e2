"""Shared helpers for the test suite."""

from .downstream_stub import StubConnector, StubDownstreamClient, StubTool, text_result

__all__ = ["StubConnector", "StubDownstreamClient", "StubTool", "text_result"]
