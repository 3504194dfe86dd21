from civic_reports.config import load_settings


def test_defaults(monkeypatch):
    for key in ("APP_ENV", "LOG_LEVEL", "SEED_DEMO_DATA", "MAX_REPORT_PHOTOS", "EVENT_BUS_BACKEND"):
        monkeypatch.delenv(key, raising=False)

    settings = load_settings()

    assert settings.app_env == "dev"
    assert settings.max_report_photos == 3
    assert settings.event_bus_backend == "inmemory"
    assert not settings.seed_demo_data
    assert not settings.is_production()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("APP_ENV", " Production ")
    monkeypatch.setenv("SEED_DEMO_DATA", "yes")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.is_production()
    assert settings.seed_demo_data
    assert settings.log_level == "DEBUG"


def test_photo_cap_can_only_be_lowered(monkeypatch):
    monkeypatch.setenv("MAX_REPORT_PHOTOS", "10")
    assert load_settings().max_report_photos == 3

    monkeypatch.setenv("MAX_REPORT_PHOTOS", "1")
    assert load_settings().max_report_photos == 1
