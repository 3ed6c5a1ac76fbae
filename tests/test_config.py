"""
test_config.py
==============
Settings loading from the environment.
"""

from postop_triage.config import DispatchConfig, Settings

ENV_VARS = [
    "NOTIFY_CLINICIAN_API", "SMS_GATEWAY_URL", "SMS_API_KEY", "CLINICIAN_PHONE",
    "CLINICIAN_EMAIL", "SAVE_RESPONSE_API", "SMTP_HOST", "SMTP_PORT", "SMTP_USER",
    "SMTP_PASS", "EMAIL_FROM", "TRIAGE_DB", "CHANNEL_TIMEOUT_SECONDS",
    "MESSAGE_LOCALE", "LOG_LEVEL", "PORT", "CORS_ORIGINS",
]


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    clear_env(monkeypatch)
    s = Settings.from_env()
    assert s.smtp_port == 587
    assert s.channel_timeout == 10.0
    assert s.locale == "vi"
    assert s.port == 3000
    assert s.dispatch_config() == DispatchConfig()


def test_reads_dispatch_options(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("NOTIFY_CLINICIAN_API", "https://hook")
    monkeypatch.setenv("SMS_GATEWAY_URL", "https://sms")
    monkeypatch.setenv("SMS_API_KEY", "k")
    monkeypatch.setenv("CLINICIAN_PHONE", "0900")
    monkeypatch.setenv("CLINICIAN_EMAIL", "doc@example.com")
    monkeypatch.setenv("SMTP_PORT", "2525")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    s = Settings.from_env()
    cfg = s.dispatch_config()
    assert cfg.clinician_endpoint == "https://hook"
    assert cfg.sms_enabled
    assert cfg.clinician_phone == "0900"
    assert cfg.clinician_email == "doc@example.com"
    assert s.smtp_port == 2525
    assert s.log_level == "DEBUG"


def test_blank_and_malformed_values_fall_back(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("SMS_GATEWAY_URL", "   ")
    monkeypatch.setenv("SMS_API_KEY", "k")
    monkeypatch.setenv("PORT", "eighty")
    monkeypatch.setenv("CHANNEL_TIMEOUT_SECONDS", "")

    s = Settings.from_env()
    assert s.sms_gateway_url is None
    assert not s.dispatch_config().sms_enabled
    assert s.port == 3000
    assert s.channel_timeout == 10.0
