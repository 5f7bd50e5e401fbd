"""
Tests pour la configuration selon ENVIRONMENT.
"""
from segment_tracker.core.settings import Settings


class TestSettings:

    def test_development_defaults(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)
        monkeypatch.delenv("FRONTEND_URL", raising=False)
        settings = Settings(_env_file=None)
        assert not settings.is_production
        assert settings.LOG_LEVEL == "INFO"
        assert "http://localhost:3000" in settings.ALLOWED_ORIGINS
        assert settings.TIMELINE_AXIS_MINUTES == 1440

    def test_production_forces_debug_off(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("FRONTEND_URL", "https://segments.example.com/")
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)
        settings = Settings(_env_file=None)
        assert settings.is_production
        assert settings.DEBUG is False
        assert settings.LOG_LEVEL == "WARNING"
        assert settings.ALLOWED_ORIGINS == ["https://segments.example.com"]
