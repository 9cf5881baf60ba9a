"""
Shared pytest fixtures.

File logging is switched off before anything under src is imported so test
runs do not litter the user log directory.
"""
import os
import threading

os.environ.setdefault("SISLOG_FILE_LOGGING", "0")

import pytest


@pytest.fixture(scope="session")
def qapp():
    """
    Ensure a QCoreApplication and the main-thread event dispatcher exist.

    Tests that hand work across threads call qapp.processEvents() to run the
    queued calls.
    """
    from PyQt6.QtCore import QCoreApplication
    from src.application.events import init_event_dispatcher

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    init_event_dispatcher()
    return app


@pytest.fixture
def run_in_thread():
    """Run a callable on a background thread and wait for it to finish."""

    def runner(fn, *args):
        thread = threading.Thread(target=fn, args=args, daemon=True)
        thread.start()
        thread.join(5.0)
        assert not thread.is_alive(), "background call did not finish"

    return runner
