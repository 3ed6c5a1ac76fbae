"""
test_notifications.py
=====================
Transport-level behaviour of the webhook, SMS and SMTP channels, with
requests.post and smtplib.SMTP replaced by recorders.
"""

import pytest
import requests

from postop_triage import notifications
from postop_triage.notifications import (
    EmailChannel, EmailNotConfigured, SmsChannel, WebhookChannel,
)


class FakeResponse:
    def __init__(self, status_code=200, text="ok"):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400


@pytest.fixture
def posts(monkeypatch):
    """Capture requests.post calls; set posts.response to change the answer."""
    class Recorder:
        response = FakeResponse()
        calls = []

        def __call__(self, url, **kwargs):
            self.calls.append((url, kwargs))
            if isinstance(self.response, Exception):
                raise self.response
            return self.response

    recorder = Recorder()
    recorder.calls = []
    monkeypatch.setattr(notifications.requests, "post", recorder)
    return recorder


# --------------------------------------------------------------------------
# WEBHOOK
# --------------------------------------------------------------------------

def test_webhook_posts_json_with_timeout(posts):
    assert WebhookChannel("https://hook").notify({"a": 1}) is True
    url, kwargs = posts.calls[0]
    assert url == "https://hook"
    assert kwargs["json"] == {"a": 1}
    assert kwargs["timeout"] == 8


def test_webhook_non_2xx_is_false(posts):
    posts.response = FakeResponse(500, "boom")
    assert WebhookChannel("https://hook").notify({}) is False


def test_webhook_transport_error_propagates(posts):
    posts.response = requests.Timeout("slow")
    with pytest.raises(requests.Timeout):
        WebhookChannel("https://hook").notify({})


def test_webhook_without_url_sends_nothing(posts):
    assert WebhookChannel(None).notify({}) is False
    assert posts.calls == []


# --------------------------------------------------------------------------
# SMS
# --------------------------------------------------------------------------

def test_sms_gateway_body(posts):
    assert SmsChannel("https://sms", "k3y").send("0900", "hello") is True
    url, kwargs = posts.calls[0]
    assert url == "https://sms"
    assert kwargs["json"] == {"api_key": "k3y", "to": "0900", "message": "hello"}
    assert kwargs["timeout"] == 10


def test_sms_unconfigured_returns_false(posts):
    assert SmsChannel("https://sms", None).send("0900", "x") is False
    assert posts.calls == []


# --------------------------------------------------------------------------
# EMAIL
# --------------------------------------------------------------------------

class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port, self.timeout = host, port, timeout
        self.logged_in = None
        self.tls = False
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def ehlo(self):
        pass

    def has_extn(self, name):
        return name == "starttls"

    def starttls(self):
        self.tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, msg):
        self.sent.append(msg)
        return {}


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(notifications.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def test_email_sends_html_over_starttls(smtp):
    channel = EmailChannel("smtp.example", 587, "user", "pw", sender="clinic@example.com")
    assert channel.send("an@example.com", "Chào", "<p>Xin chào</p>") is True

    server = smtp.instances[0]
    assert (server.host, server.port) == ("smtp.example", 587)
    assert server.tls is True
    assert server.logged_in == ("user", "pw")
    msg = server.sent[0]
    assert msg["To"] == "an@example.com"
    assert msg["From"] == "clinic@example.com"
    assert msg["Subject"] == "Chào"
    assert "<p>Xin chào</p>" in msg.get_body(preferencelist=("html",)).get_content()


def test_email_without_credentials_skips_login(smtp):
    EmailChannel("smtp.example", 25, sender="clinic@example.com").send("a@b.c", "s", "<p/>")
    assert smtp.instances[0].logged_in is None


def test_email_without_host_raises():
    with pytest.raises(EmailNotConfigured):
        EmailChannel(None).send("a@b.c", "s", "<p/>")
