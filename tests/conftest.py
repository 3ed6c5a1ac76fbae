"""
conftest.py
===========
Shared fixtures: in-process channel fakes that record every call, and a
temporary SQLite-backed store.
"""

import time
import pytest

from postop_triage.config import DispatchConfig
from postop_triage.db import SubmissionStore
from postop_triage.dispatcher import Dispatcher


class FakeWebhook:
    """Records payloads; can be told to fail, raise or hang."""

    def __init__(self, url="https://clinic.example/hook", ok=True, error=None, delay=0.0):
        self.url = url
        self.ok = ok
        self.error = error
        self.delay = delay
        self.calls = []

    def notify(self, payload):
        self.calls.append(payload)
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return self.ok


class FakeSender:
    """Stands in for SmsChannel / EmailChannel: records positional args."""

    def __init__(self, ok=True, error=None, delay=0.0):
        self.ok = ok
        self.error = error
        self.delay = delay
        self.calls = []

    def send(self, *args):
        self.calls.append(args)
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return self.ok


FULL_CONFIG = DispatchConfig(
    clinician_endpoint="https://clinic.example/hook",
    sms_gateway_url="https://sms.example/send",
    sms_api_key="secret",
    clinician_phone="+84900000000",
    clinician_email="oncall@clinic.example",
)


@pytest.fixture
def channels():
    return {"clinician": FakeWebhook(), "sms": FakeSender(), "email": FakeSender()}


@pytest.fixture
def dispatcher(channels):
    return Dispatcher(FULL_CONFIG, timeout=2.0, **channels)


@pytest.fixture
def store(tmp_path):
    s = SubmissionStore.for_path(str(tmp_path / "triage.db")).open()
    yield s
    s.close()
