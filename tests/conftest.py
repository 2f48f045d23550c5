import threading
from contextlib import contextmanager

import pytest

from menu_service.api.app import create_app
from menu_service.core.settings import Settings
from menu_service.domain.services.menu_service import default_store


@pytest.fixture
def store():
    return default_store()


@pytest.fixture
def settings():
    return Settings(PORT=8080, _env_file=None)


@pytest.fixture
def app(store, settings):
    return create_app(store, settings)


@pytest.fixture
def client(app):
    return app.test_client()


@contextmanager
def serving(lifecycle):
    """Run a ServerLifecycle in a background thread until the block exits."""
    result = {}

    def target():
        result["code"] = lifecycle.run(install_signals=False)

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    assert lifecycle.listening.wait(5), "server did not start"
    try:
        yield result, thread
    finally:
        lifecycle.request_shutdown("test teardown")
        thread.join(10)
