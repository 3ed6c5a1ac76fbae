"""
workflow.py
===========
Submission handling for the post-op check-in backend:
 - capture():            stamp an inbound form payload with its arrival time
 - TriageService.on_submission(): store -> forward to CRM -> classify -> dispatch
 - direct clinician alerts, one-off email / SMS, appointment booking
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from .classifier import classify
from .db import SubmissionStore
from .dispatcher import Dispatcher, attempt, skipped
from .models import Appointment
from .schemas import (
    AppointmentRequest, AppointmentResponse, ChannelResult,
    ClinicianAlertOutcome, IntakeRecord, SubmissionResult,
)
from . import templates

logger = logging.getLogger(__name__)


def capture(raw: Optional[Dict[str, Any]]) -> IntakeRecord:
    """Build an IntakeRecord from a raw form payload, stamped with the arrival time."""
    data = dict(raw or {})
    data["timestamp"] = datetime.now(timezone.utc).isoformat()
    return IntakeRecord.model_validate(data)


class TriageService:
    """Wires the store, the dispatcher and the optional CRM forward together."""

    def __init__(self, store: SubmissionStore, dispatcher: Dispatcher, crm=None):
        self.store = store
        self.dispatcher = dispatcher
        self.crm = crm
        self._background: Set[asyncio.Task] = set()

    # ---------------------------------------------------------------------
    # CHECK-IN SUBMISSIONS
    # ---------------------------------------------------------------------

    async def save(self, record: IntakeRecord) -> bool:
        """Best-effort raw persistence; a store error is logged and reported as False."""
        try:
            await asyncio.to_thread(self.store.append, record.to_payload())
            return True
        except Exception:
            logger.exception("⚠️ Could not store submission from %s", record.name)
            return False

    def forward_to_crm(self, record: IntakeRecord) -> Optional[asyncio.Task]:
        """Fire-and-forget copy of the raw submission to the CRM webhook, if any."""
        if self.crm is None or not getattr(self.crm, "url", None):
            return None
        task = asyncio.create_task(
            attempt("crm", self.crm.notify, record.to_payload(), timeout=self.dispatcher.timeout)
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def on_submission(self, record) -> SubmissionResult:
        """
        Process one check-in.
        Steps:
          1. Store the raw record (best-effort)
          2. Forward it to the CRM webhook (background)
          3. Classify
          4. Dispatch notifications for the tier
        Always returns ok=True; channel failures only show up in the outcome.
        """
        rec = IntakeRecord.coerce(record)
        await self.save(rec)
        self.forward_to_crm(rec)

        tier = classify(rec)
        logger.info("🩺 Check-in from %s classified %s", rec.name, tier.value.upper())

        outcome = await self.dispatcher.dispatch(rec, tier)
        return SubmissionResult(ok=True, classification=tier, outcome=outcome)

    async def drain(self) -> None:
        """Wait for outstanding background forwards (used at shutdown and in tests)."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ---------------------------------------------------------------------
    # CLINICIAN / ONE-OFF MESSAGES
    # ---------------------------------------------------------------------

    async def notify_clinician(self, payload: Dict[str, Any]) -> ClinicianAlertOutcome:
        return await self.dispatcher.alert_clinician(payload)

    async def send_email(self, to: str, subject: str, html: str) -> ChannelResult:
        if self.dispatcher.email is None:
            return skipped("email", "no email channel")
        return await attempt("email", self.dispatcher.email.send, to, subject, html,
                             timeout=self.dispatcher.timeout)

    async def send_sms(self, to: str, message: str) -> ChannelResult:
        if self.dispatcher.sms is None or not self.dispatcher.config.sms_enabled:
            return skipped("sms", "no SMS gateway configured")
        return await attempt("sms", self.dispatcher.sms.send, to, message,
                             timeout=self.dispatcher.timeout)

    # ---------------------------------------------------------------------
    # APPOINTMENTS
    # ---------------------------------------------------------------------

    async def create_appointment(self, req: AppointmentRequest):
        """
        Book an appointment and email a confirmation when the patient gave an address.
        Returns (appointment, confirmation result).
        """
        appt = Appointment(
            id=f"APPT-{int(time.time() * 1000)}-{uuid.uuid4().hex[:4]}",
            name=req.name,
            phone=req.phone,
            email=req.email,
            date=req.preferred_date,
            procedure=req.procedure,
        )
        await asyncio.to_thread(self.store.add_appointment, appt)
        logger.info("📅 Appointment %s created for %s", appt.id, appt.name)

        response = AppointmentResponse(
            id=appt.id, name=appt.name, phone=appt.phone, date=appt.date, procedure=appt.procedure,
        )
        if not req.email or not req.email.strip():
            return response, skipped("email", "no email address on request")

        message = templates.appointment_email(appt.date, appt.procedure, self.dispatcher.locale)
        confirmation = await self.send_email(req.email.strip(), message["subject"], message["html"])
        return response, confirmation
