"""
Test utilities for imes.

Components:
    MockProjection: Projection returning canned updates per event name
    RecordingListener: Listener recording emit results for assertions

Note:
    This module is intended for test code only. It should not be imported
    in production code paths.
"""

from imes.testing.mocks import MockProjection, RecordingListener

__all__ = [
    "MockProjection",
    "RecordingListener",
]
