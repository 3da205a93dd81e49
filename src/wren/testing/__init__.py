"""Test utilities for wren applications.

    from wren.testing import RecordingResponseSink, TestClient
"""

from wren.testing.client import TestClient, TestResponse
from wren.testing.sink import RecordingResponseSink

__all__ = [
    "RecordingResponseSink",
    "TestClient",
    "TestResponse",
]
