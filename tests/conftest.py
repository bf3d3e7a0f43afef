import pytest

from relay_node import app as app_module


SECRET = "9b1deb4d-3b7d-4bad-9bdd-2b0d7b3dcb6d"


@pytest.fixture
def secret():
    return SECRET


@pytest.fixture
def raw_config():
    return {
        "node.name": "relay-01",
        "node.secret": SECRET,
        "channel.publish": "true",
        "namespaces": "public, news",
        "namespace.news.publish": "true",
        "namespace.news.history_size": "10",
        "namespace.news.history_lifetime": "30",
    }


@pytest.fixture
def no_side_effects(monkeypatch):
    """Stop make_app from installing manhole or real signal handlers."""
    handlers = {}
    monkeypatch.setattr(app_module.manhole, "install", lambda **kwargs: None)
    monkeypatch.setattr(app_module.signal, "signal", handlers.__setitem__)
    monkeypatch.setattr(app_module.signal, "siginterrupt", lambda *args: None)
    return handlers
