from obligation_tracker.core.config import Settings


def test_allowed_origins_accept_comma_separated_values(monkeypatch) -> None:
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.local, http://b.local,")

    settings = Settings()

    assert settings.allowed_origins == ["http://a.local", "http://b.local"]


def test_reporting_thresholds_default_and_override(monkeypatch) -> None:
    assert Settings().bottleneck_stale_days == 5
    assert Settings().deadline_approaching_days == 3

    monkeypatch.setenv("BOTTLENECK_STALE_DAYS", "7")

    assert Settings().bottleneck_stale_days == 7
