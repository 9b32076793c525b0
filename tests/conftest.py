"""Pytest configuration for bytepattern tests."""

import signal
import sys

import pytest

from bytepattern import compile, match


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "timeout(seconds): set custom timeout for test")


def timeout_handler(signum, frame):
    """Handle timeout signal."""
    pytest.fail("Test timed out")


@pytest.fixture(autouse=True)
def test_timeout(request):
    """Fail any test that runs longer than its timeout.

    Every match must terminate, so a hang is a failure rather than a slow
    test. Default is 5 seconds; override with @pytest.mark.timeout(30).
    """
    if sys.platform != "win32":
        marker = request.node.get_closest_marker("timeout")
        timeout_seconds = marker.args[0] if marker else 5

        old_handler = signal.signal(signal.SIGALRM, timeout_handler)
        signal.alarm(timeout_seconds)
        yield
        signal.alarm(0)
        signal.signal(signal.SIGALRM, old_handler)
    else:
        yield


@pytest.fixture
def find():
    """Compile a pattern and match it against input in one call."""
    def _find(pattern, data):
        return match(data, compile(pattern))
    return _find
