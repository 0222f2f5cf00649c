"""Testing utilities for SCM hosting settings."""

from .mocks import FakeClock, MockFileSystem, RecordedEvent, RecordingEventSink

__all__ = [
    "FakeClock",
    "MockFileSystem",
    "RecordedEvent",
    "RecordingEventSink",
]
