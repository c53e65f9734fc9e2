"""Pytest configuration and fixtures."""

import threading
from collections.abc import Generator

import pytest

# Enable pytest-asyncio for all tests
pytest_plugins = ("pytest_asyncio",)


# Thread names that are expected to be long-running and should be ignored
# by the resource tracker. These are typically from third-party libraries.
_IGNORED_THREAD_PREFIXES = (
    "MainThread",
    "ThreadPoolExecutor",  # Python's ThreadPoolExecutor workers (aiofiles)
    "asyncio_",  # asyncio internal threads
    "concurrent.futures",  # concurrent.futures workers
    "Thread-",  # Generic numbered threads (often from third-party libs)
    "pydevd",  # Debugger threads
)


def _is_tracked_thread(t: threading.Thread) -> bool:
    """Check if a thread should be tracked for leak detection.

    Only non-daemon threads that aren't from known background services count.
    """
    if t.daemon:
        return False
    if t.name is None:
        return True
    return not any(t.name.startswith(prefix) for prefix in _IGNORED_THREAD_PREFIXES)


@pytest.fixture(autouse=True)
def thread_leak_tracker() -> Generator[None, None, None]:
    """Fail tests that leave non-daemon threads running."""
    baseline_threads = {t for t in threading.enumerate() if _is_tracked_thread(t)}

    yield

    leaked = {
        t for t in threading.enumerate() if _is_tracked_thread(t)
    } - baseline_threads
    if leaked:
        pytest.fail(
            f"Thread leak detected - {len(leaked)} thread(s): "
            f"{[t.name for t in leaked]}. "
            "Tests must join all threads before completion."
        )
