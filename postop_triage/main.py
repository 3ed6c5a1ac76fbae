"""
main.py
========
FastAPI entry point for the post-operative check-in backend.
It:
 - Opens the submission store on startup and closes it on shutdown.
 - Receives form submissions, classifies them and dispatches notifications.
 - Exposes helper endpoints for clinician alerts, email, SMS and appointments.
"""

import logging
from typing import Any, Dict, Optional

import uvicorn
from fastapi import Body, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, configure_logging
from .db import SubmissionStore
from .dispatcher import Dispatcher
from .notifications import EmailChannel, SmsChannel, WebhookChannel
from .schemas import AppointmentRequest, SendEmailRequest, SendSmsRequest, SubmissionResult
from .workflow import TriageService, capture

logger = logging.getLogger(__name__)


def build_service(settings: Settings) -> TriageService:
    """Create the store, the channel transports and the dispatcher from settings."""
    email = EmailChannel(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_pass,
        sender=settings.email_from,
    )
    dispatcher = Dispatcher(
        settings.dispatch_config(),
        clinician=WebhookChannel(settings.notify_clinician_api),
        sms=SmsChannel(settings.sms_gateway_url, settings.sms_api_key),
        email=email,
        timeout=settings.channel_timeout,
        locale=settings.locale,
    )
    crm = WebhookChannel(settings.save_response_api) if settings.save_response_api else None
    return TriageService(SubmissionStore.for_path(settings.db_path), dispatcher, crm=crm)


def create_app(settings: Optional[Settings] = None, service: Optional[TriageService] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    service = service or build_service(settings)

    # -----------------------------------------------------------------------
    # APP INITIALIZATION
    # -----------------------------------------------------------------------

    app = FastAPI(title="Post-op Triage Backend", version="1.0")
    app.state.settings = settings
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # LIFECYCLE
    # -----------------------------------------------------------------------

    @app.on_event("startup")
    async def startup_event():
        configure_logging(settings.log_level)
        logger.info("🚀 Starting post-op triage backend...")
        service.store.open()

    @app.on_event("shutdown")
    async def shutdown_event():
        await service.drain()
        service.store.close()

    # -----------------------------------------------------------------------
    # FORM WEBHOOK
    # -----------------------------------------------------------------------

    @app.post("/webhook/form-submit", response_model=SubmissionResult)
    async def form_submit(data: Optional[Dict[str, Any]] = Body(default=None)):
        """
        Receive one check-in from the intake form.

        - Stores the raw submission and forwards it to the CRM webhook
        - Classifies it RED / YELLOW / GREEN
        - Notifies clinician and patient according to the tier
        """
        record = capture(data)
        return await service.on_submission(record)

    # -----------------------------------------------------------------------
    # HELPER ENDPOINTS
    # -----------------------------------------------------------------------

    @app.post("/api/save-response")
    async def save_response(data: Optional[Dict[str, Any]] = Body(default=None)):
        """Store a submission without triaging it."""
        saved = await service.save(capture(data))
        return {"ok": saved}

    @app.post("/api/notify-clinician")
    async def notify_clinician(data: Optional[Dict[str, Any]] = Body(default=None)):
        """Email and text the on-call clinician about a patient."""
        outcome = await service.notify_clinician(data or {})
        return {"ok": True, "outcome": outcome.model_dump()}

    @app.post("/api/send-email")
    async def send_email(req: SendEmailRequest):
        result = await service.send_email(req.email, req.subject, req.html)
        return {"ok": result.succeeded}

    @app.post("/api/send-sms")
    async def send_sms(req: SendSmsRequest):
        result = await service.send_sms(req.phone, req.message)
        return {"ok": result.succeeded}

    @app.post("/api/create-appointment")
    async def create_appointment(req: AppointmentRequest):
        """Book a follow-up appointment and send a confirmation email."""
        appointment, confirmation = await service.create_appointment(req)
        return {
            "ok": True,
            "appointment": appointment.model_dump(),
            "confirmation": confirmation.model_dump(),
        }

    @app.get("/api/submissions")
    def list_submissions(request: Request, limit: Optional[int] = None):
        """Raw submissions received so far, oldest first."""
        return {"submissions": request.app.state.service.store.list_submissions(limit)}

    @app.get("/")
    def root():
        """Basic health check endpoint."""
        return {"message": "Post-op triage backend is running!"}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn on $PORT."""
    settings = app.state.settings
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
