from __future__ import annotations

import pytest

from chefmate.server import run


@pytest.fixture()
def fake_uvicorn(monkeypatch):
    captured = {}

    class DummyConfig:
        def __init__(self, app, **kwargs):
            captured["app"] = app
            captured.update(kwargs)

    class DummyServer:
        def __init__(self, config):
            self.config = config
            self.should_exit = False

        def run(self):
            captured["ran"] = True

    monkeypatch.setattr(run.uvicorn, "Config", DummyConfig)
    monkeypatch.setattr(run.uvicorn, "Server", DummyServer)
    monkeypatch.delenv("RELOAD", raising=False)
    monkeypatch.delenv("CHEFMATE_SERVER_DURATION", raising=False)
    return captured


def test_main_reads_bind_from_environment(fake_uvicorn, monkeypatch):
    monkeypatch.setenv("CHEFMATE_SERVER_HOST", "0.0.0.0")
    monkeypatch.setenv("CHEFMATE_SERVER_PORT", "9001")

    run.main()

    assert fake_uvicorn["app"] == "chefmate.server.app:app"
    assert fake_uvicorn["host"] == "0.0.0.0"
    assert fake_uvicorn["port"] == 9001
    assert fake_uvicorn["log_config"] is None
    assert fake_uvicorn["ran"] is True


def test_explicit_bind_wins(fake_uvicorn, monkeypatch):
    monkeypatch.setenv("CHEFMATE_SERVER_PORT", "9001")

    run.main(host="localhost", port=8123)

    assert fake_uvicorn["host"] == "localhost"
    assert fake_uvicorn["port"] == 8123


@pytest.mark.parametrize("duration", ["soon", "-1"])
def test_invalid_duration_exits(fake_uvicorn, monkeypatch, duration):
    monkeypatch.setenv("CHEFMATE_SERVER_DURATION", duration)

    with pytest.raises(SystemExit):
        run.main()


def test_reload_and_duration_conflict(fake_uvicorn, monkeypatch):
    monkeypatch.setenv("RELOAD", "1")
    monkeypatch.setenv("CHEFMATE_SERVER_DURATION", "5")

    with pytest.raises(SystemExit):
        run.main()
