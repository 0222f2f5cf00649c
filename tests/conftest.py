"""Pytest fixtures for SCM hosting settings tests."""

import pytest

from scmsettings.provider import HostingConfigurations
from scmsettings.testing import FakeClock, MockFileSystem, RecordingEventSink

CONFIGS_FILE = "/site/ScmHostingConfigurations.txt"


@pytest.fixture
def clock():
    """Provide a manually advanced clock."""
    return FakeClock()


@pytest.fixture
def file_system():
    """Provide an empty in-memory file system."""
    return MockFileSystem()


@pytest.fixture
def events():
    """Provide a recording event sink."""
    sink = RecordingEventSink()
    yield sink
    sink.clear()


@pytest.fixture
def environ():
    """Provide an isolated environment mapping."""
    return {}


@pytest.fixture
def provider(file_system, events, clock, environ):
    """Provide a provider wired to fakes."""
    return HostingConfigurations(
        configs_file=CONFIGS_FILE,
        file_system=file_system,
        events=events,
        site_name=lambda: "test-site",
        clock=clock,
        environ=environ,
    )
