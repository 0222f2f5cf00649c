"""Concrete collaborators for the hosting settings provider."""

from .events import LoggingEventSink, QueuedEventSink
from .filesystem import LocalFileSystem

__all__ = [
    "LocalFileSystem",
    "LoggingEventSink",
    "QueuedEventSink",
]
