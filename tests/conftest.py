import os
import sys
import asyncio
import inspect

import pytest

# Ensure project root is on sys.path so `import app` works in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.obs.call_logger import CallLogger
from app.obs.context import clear_context
from app.obs.metrics import reset_metrics
from app.obs.sinks import MemorySink


def pytest_pyfunc_call(pyfuncitem):
    """Allow running async tests without pytest-asyncio.

    If the test function is a coroutine, run it in a fresh event loop.
    """
    testfunction = pyfuncitem.obj
    if inspect.iscoroutinefunction(testfunction):
        funcargs = pyfuncitem.funcargs
        sig = inspect.signature(testfunction)
        # Filter only the parameters that the test function expects
        allowed = {name: funcargs[name] for name in sig.parameters.keys() if name in funcargs}
        asyncio.run(testfunction(**allowed))
        return True
    return None


@pytest.fixture(autouse=True)
def _isolated_observability():
    clear_context()
    reset_metrics()
    yield
    clear_context()


@pytest.fixture
def sink():
    return MemorySink()


@pytest.fixture
def call_logger(sink):
    return CallLogger(sink=sink)
