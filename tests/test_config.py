from qbank_sharing.core.config import get_settings


def test_server_settings_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "9100")
    monkeypatch.setenv("RELOAD", "true")
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.HOST == "0.0.0.0"
    assert settings.PORT == 9100
    assert settings.RELOAD is True
