from src.schedule_proxy.config import ScheduleProxyConfig


def test_defaults(monkeypatch):
    for var in ("PORT", "PORTAL_URL", "CACHE_TTL_SECONDS", "NAVIGATION_TIMEOUT_MS", "HEADLESS"):
        monkeypatch.delenv(var, raising=False)

    config = ScheduleProxyConfig()
    assert config.port == 3000
    assert config.cache_ttl_seconds == 60
    assert config.navigation_timeout_ms == 10000
    assert config.headless is True
    assert config.portal_domain == "portal.psuti.ru"
    assert config.schedule_url == "https://portal.psuti.ru/psuti/schedule-open/list"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORTAL_URL", "https://schedule.example.edu/")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "5")
    monkeypatch.setenv("RELAUNCH_ON_CRASH", "false")

    config = ScheduleProxyConfig()
    assert config.portal_domain == "schedule.example.edu"
    assert config.schedule_url == "https://schedule.example.edu/psuti/schedule-open/list"
    assert config.cache_ttl_seconds == 5
    assert config.relaunch_on_crash is False
