from clinic_dashboard.config import Settings
from clinic_dashboard.models import GroupKey


def test_defaults(monkeypatch):
    for name in ("DASHBOARD_WINDOW", "DASHBOARD_GROUP_BY", "N8N_DONE_WEBHOOK", "PAYLOAD_TIMESTAMP"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.window_days is None
    assert settings.group_by == GroupKey.RAW
    assert settings.done_webhook is None
    assert settings.payload.timestamp == "per_action"


def test_from_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://clinic.supabase.co/")
    monkeypatch.setenv("DASHBOARD_WINDOW", "20")
    monkeypatch.setenv("DASHBOARD_GROUP_BY", "display")
    monkeypatch.setenv("DASHBOARD_ACCORDION", "1")
    monkeypatch.setenv("PAYLOAD_IDENTIFIER", "slot")
    monkeypatch.setenv("PAYLOAD_TIMESTAMP", "combined")
    monkeypatch.setenv("N8N_CANCEL_WEBHOOK", "https://hooks.example.com/cancel")

    settings = Settings.from_env()

    assert settings.supabase_url == "https://clinic.supabase.co"
    assert settings.window_days == 20
    assert settings.group_by == GroupKey.DISPLAY
    assert settings.accordion
    assert settings.payload.identifier == "slot"
    assert settings.payload.timestamp == "combined"
    assert settings.cancel_webhook == "https://hooks.example.com/cancel"
