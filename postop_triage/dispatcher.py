"""
dispatcher.py
=============
Turns a classified check-in into notification attempts:
 - RED:    clinician webhook, urgent SMS to the patient, urgent email to the patient
 - YELLOW: "monitor, we will call you back" email to the patient
 - GREEN:  self-care instructions email to the patient

Channels whose destination is not configured (or whose contact detail is
missing from the record) are skipped. Eligible channels run concurrently,
each with its own timeout, and a failing channel never stops the others.
"""

import asyncio
import logging
from typing import Any, Callable, Dict

from .classifier import summarize
from .config import DispatchConfig
from .models import SeverityTier
from .schemas import (
    ChannelResult, ClinicianAlertOutcome, DispatchOutcome, IntakeRecord,
)
from . import templates

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_TIMEOUT = 10.0

# ---------------------------------------------------------------------------
# SINGLE-ATTEMPT WRAPPER
# ---------------------------------------------------------------------------

async def attempt(
    channel: str,
    send: Callable[..., Any],
    *args: Any,
    timeout: float = DEFAULT_CHANNEL_TIMEOUT,
) -> ChannelResult:
    """
    Run one blocking ``send`` call in a worker thread and record how it went.
    Exceptions, timeouts and a falsy return all count as a failed attempt.
    """
    try:
        ok = await asyncio.wait_for(asyncio.to_thread(send, *args), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("❌ %s delivery timed out after %ss", channel, timeout)
        return ChannelResult(channel=channel, attempted=True, succeeded=False, error="timeout")
    except Exception as e:
        logger.warning("❌ %s delivery failed: %s", channel, e)
        return ChannelResult(channel=channel, attempted=True, succeeded=False, error=str(e) or type(e).__name__)

    if not ok:
        logger.warning("❌ %s delivery was not accepted", channel)
        return ChannelResult(channel=channel, attempted=True, succeeded=False, error="rejected")
    logger.info("✅ %s delivered", channel)
    return ChannelResult(channel=channel, attempted=True, succeeded=True)


def skipped(channel: str, reason: str) -> ChannelResult:
    logger.debug("%s skipped: %s", channel, reason)
    return ChannelResult(channel=channel, attempted=False, succeeded=False)


# ---------------------------------------------------------------------------
# DISPATCHER
# ---------------------------------------------------------------------------

class Dispatcher:
    """
    Tier policy + failure-isolated delivery.

    ``clinician`` needs ``notify(payload) -> bool``, ``sms`` needs
    ``send(phone, text) -> bool`` and ``email`` needs
    ``send(address, subject, html) -> bool``. All three are blocking calls.
    """

    def __init__(
        self,
        config: DispatchConfig,
        clinician=None,
        sms=None,
        email=None,
        timeout: float = DEFAULT_CHANNEL_TIMEOUT,
        locale: str = templates.DEFAULT_LOCALE,
    ):
        self.config = config
        self.clinician = clinician
        self.sms = sms
        self.email = email
        self.timeout = timeout
        self.locale = locale

    async def dispatch(self, record, tier: SeverityTier) -> DispatchOutcome:
        """
        Attempt every channel the tier calls for and return per-channel results.
        Not idempotent: calling twice sends everything twice.
        """
        rec = IntakeRecord.coerce(record)
        tier = SeverityTier(tier)
        summary = summarize(rec)
        logger.info("🩺 Dispatching %s check-in for %s", tier.value.upper(), rec.name or "<unnamed>")

        if tier == SeverityTier.RED:
            clinician_job = self._clinician_alert(rec, tier, summary)
            sms_job = self._patient_sms(rec)
        else:
            clinician_job = _skip_later("clinician", f"not used for {tier.value}")
            sms_job = _skip_later("sms", f"not used for {tier.value}")
        email_job = self._patient_email(rec, tier, summary)

        # started in listed order: clinician, sms, email
        clinician, sms, email = await asyncio.gather(clinician_job, sms_job, email_job)
        outcome = DispatchOutcome(tier=tier, clinician=clinician, sms=sms, email=email)
        logger.info("📨 %s dispatch attempted: %s", tier.value.upper(), outcome.attempted_channels() or "none")
        return outcome

    # -- per-channel jobs ---------------------------------------------------

    def _clinician_alert(self, rec: IntakeRecord, tier: SeverityTier, summary: str):
        if not self.config.clinician_endpoint or self.clinician is None:
            return _skip_later("clinician", "no clinician endpoint configured")
        payload = {**rec.to_payload(), "classification": tier.value, "summary": summary}
        return attempt("clinician", self.clinician.notify, payload, timeout=self.timeout)

    def _patient_sms(self, rec: IntakeRecord):
        if not self.config.sms_enabled or self.sms is None:
            return _skip_later("sms", "no SMS gateway configured")
        if not rec.contact_phone:
            return _skip_later("sms", "record has no phone number")
        return attempt("sms", self.sms.send, rec.contact_phone, templates.urgent_sms(self.locale),
                       timeout=self.timeout)

    def _patient_email(self, rec: IntakeRecord, tier: SeverityTier, summary: str):
        if not rec.contact_email:
            return _skip_later("email", "record has no email address")
        if self.email is None:
            return _skip_later("email", "no email channel")
        message = templates.patient_email(tier, summary, self.locale)
        return attempt("email", self.email.send, rec.contact_email, message["subject"], message["html"],
                       timeout=self.timeout)

    # -- direct clinician alert --------------------------------------------

    async def alert_clinician(self, payload: Dict[str, Any]) -> ClinicianAlertOutcome:
        """
        Email and text the on-call clinician about ``payload``.
        Each leg is skipped when its destination is not configured.
        """
        if self.config.clinician_email and self.email is not None:
            message = templates.clinician_email(payload, self.locale)
            email_job = attempt("clinician_email", self.email.send, self.config.clinician_email,
                                message["subject"], message["html"], timeout=self.timeout)
        else:
            email_job = _skip_later("clinician_email", "no clinician email configured")

        if self.config.clinician_phone and self.config.sms_enabled and self.sms is not None:
            sms_job = attempt("clinician_sms", self.sms.send, self.config.clinician_phone,
                              templates.clinician_sms(payload), timeout=self.timeout)
        else:
            sms_job = _skip_later("clinician_sms", "no clinician phone or SMS gateway configured")

        email_result, sms_result = await asyncio.gather(email_job, sms_job)
        return ClinicianAlertOutcome(email=email_result, sms=sms_result)


async def _skip_later(channel: str, reason: str) -> ChannelResult:
    return skipped(channel, reason)
