import pytest

from fieldroute.config import Settings


def test_defaults():
    config = Settings(_env_file=None)

    assert config.api_prefix == "/api"
    assert config.average_speed_mph == 30
    assert config.departure_options == (420, 450, 480, 510, 540)


def test_tuples_parse_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FIELDROUTE_DEPARTURE_OPTIONS", "450, 510")
    monkeypatch.setenv("FIELDROUTE_FRONTEND_ALLOWED_ORIGINS", '["https://dispatch.example.com"]')
    monkeypatch.setenv("FIELDROUTE_MAX_JOBS_PER_WORKER", "5")

    config = Settings(_env_file=None)

    assert config.departure_options == (450, 510)
    assert config.frontend_allowed_origins == ("https://dispatch.example.com",)
    assert config.max_jobs_per_worker == 5
