"""
config.py
=========
Environment-driven configuration for the post-op triage backend.
Values are read from the process environment (a local .env file is loaded
first, if present). An empty variable counts as "not configured".
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    try:
        return int(_env(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(_env(name, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class DispatchConfig:
    """Destinations the dispatcher may notify. A missing value disables that channel."""
    clinician_endpoint: Optional[str] = None
    sms_gateway_url: Optional[str] = None
    sms_api_key: Optional[str] = None
    clinician_phone: Optional[str] = None
    clinician_email: Optional[str] = None

    @property
    def sms_enabled(self) -> bool:
        return bool(self.sms_gateway_url and self.sms_api_key)


@dataclass(frozen=True)
class Settings:
    """Immutable process settings, built once at startup."""
    notify_clinician_api: Optional[str] = None
    sms_gateway_url: Optional[str] = None
    sms_api_key: Optional[str] = None
    clinician_phone: Optional[str] = None
    clinician_email: Optional[str] = None
    save_response_api: Optional[str] = None

    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    email_from: Optional[str] = None

    db_path: str = os.path.join("data", "triage.db")
    channel_timeout: float = 10.0
    locale: str = "vi"
    log_level: str = "INFO"
    port: int = 3000
    cors_origins: tuple = field(default_factory=lambda: ("*",))

    @classmethod
    def from_env(cls) -> "Settings":
        origins = _env("CORS_ORIGINS")
        return cls(
            notify_clinician_api=_env("NOTIFY_CLINICIAN_API"),
            sms_gateway_url=_env("SMS_GATEWAY_URL"),
            sms_api_key=_env("SMS_API_KEY"),
            clinician_phone=_env("CLINICIAN_PHONE"),
            clinician_email=_env("CLINICIAN_EMAIL"),
            save_response_api=_env("SAVE_RESPONSE_API"),
            smtp_host=_env("SMTP_HOST"),
            smtp_port=_env_int("SMTP_PORT", 587),
            smtp_user=_env("SMTP_USER"),
            smtp_pass=_env("SMTP_PASS"),
            email_from=_env("EMAIL_FROM"),
            db_path=_env("TRIAGE_DB", os.path.join("data", "triage.db")),
            channel_timeout=_env_float("CHANNEL_TIMEOUT_SECONDS", 10.0),
            locale=_env("MESSAGE_LOCALE", "vi"),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            port=_env_int("PORT", 3000),
            cors_origins=tuple(o.strip() for o in origins.split(",")) if origins else ("*",),
        )

    def dispatch_config(self) -> DispatchConfig:
        return DispatchConfig(
            clinician_endpoint=self.notify_clinician_api,
            sms_gateway_url=self.sms_gateway_url,
            sms_api_key=self.sms_api_key,
            clinician_phone=self.clinician_phone,
            clinician_email=self.clinician_email,
        )


def configure_logging(level: str = "INFO") -> None:
    """Install the root log format once; later calls only adjust the level."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger().setLevel(getattr(logging, level, logging.INFO))
