from socialnet import main
from socialnet.core.config import settings


def test_run_serves_on_configured_address(monkeypatch):
    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    main.run()

    assert len(calls) == 1
    app, kwargs = calls[0]
    assert app == "socialnet.main:app"
    assert kwargs["host"] == settings.api_host
    assert kwargs["port"] == settings.api_port
