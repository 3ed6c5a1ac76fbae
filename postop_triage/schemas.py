"""
schemas.py
==========
Pydantic models for inbound check-ins, dispatch results and the
request/response bodies of the HTTP API.
"""

import re
import unicodedata
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Mapping, Optional, Union

from .models import SeverityTier

BLEEDING_TRUTHY = frozenset({"yes", "có"})

_LEADING_FLOAT = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_LEADING_INT = re.compile(r"^\s*[+-]?\d+", re.ASCII)


def parse_float(value: Any) -> float:
    """Leading decimal number of ``value``'s text form, or 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    match = _LEADING_FLOAT.match(str(value))
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except (ValueError, OverflowError):
        return 0.0


def parse_int(value: Any) -> Union[int, float]:
    """
    Leading integer of ``value``'s text form, or 0. Digit runs too long for
    int() come back as a float (+-inf).
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, float):
        value = repr(value) if value == value else ""
    match = _LEADING_INT.match(str(value))
    if not match:
        return 0
    try:
        return int(match.group(0))
    except ValueError:
        return float(match.group(0))


def is_present(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


class IntakeRecord(BaseModel):
    """
    One patient self-report. Every field is optional and accepted as sent;
    unknown form fields are kept alongside the known ones.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    name: Optional[Any] = None
    phone: Optional[Any] = None
    email: Optional[Any] = None
    temperature: Optional[Any] = None
    pain_level: Optional[Any] = None
    bleeding: Optional[Any] = None
    symptoms: Optional[Any] = None
    timestamp: Optional[Any] = None

    @classmethod
    def coerce(cls, record: Union["IntakeRecord", Mapping[str, Any], None]) -> "IntakeRecord":
        if isinstance(record, IntakeRecord):
            return record
        return cls.model_validate(dict(record or {}))

    @property
    def temperature_c(self) -> float:
        return parse_float(self.temperature)

    @property
    def pain_score(self) -> Union[int, float]:
        return parse_int(self.pain_level)

    @property
    def has_bleeding(self) -> bool:
        if self.bleeding is None:
            return False
        flag = unicodedata.normalize("NFC", str(self.bleeding)).casefold()
        return flag in BLEEDING_TRUTHY

    @property
    def contact_phone(self) -> Optional[str]:
        return str(self.phone).strip() if is_present(self.phone) else None

    @property
    def contact_email(self) -> Optional[str]:
        return str(self.email).strip() if is_present(self.email) else None

    def to_payload(self) -> Dict[str, Any]:
        """The submitted fields (known and extra) exactly as received."""
        return self.model_dump(exclude_unset=True)


# ---------------------------------------------------------------------------
# DISPATCH RESULTS
# ---------------------------------------------------------------------------

class ChannelResult(BaseModel):
    """Result of (at most) one delivery attempt on one channel."""
    channel: str
    attempted: bool = False
    succeeded: bool = False
    error: Optional[str] = None


class DispatchOutcome(BaseModel):
    """Per-channel results of dispatching one classified check-in."""
    tier: SeverityTier
    clinician: ChannelResult = Field(default_factory=lambda: ChannelResult(channel="clinician"))
    sms: ChannelResult = Field(default_factory=lambda: ChannelResult(channel="sms"))
    email: ChannelResult = Field(default_factory=lambda: ChannelResult(channel="email"))

    def attempted_channels(self) -> List[str]:
        return [r.channel for r in (self.clinician, self.sms, self.email) if r.attempted]


class ClinicianAlertOutcome(BaseModel):
    """Results of a direct clinician alert (email + SMS to the on-call clinician)."""
    email: ChannelResult = Field(default_factory=lambda: ChannelResult(channel="clinician_email"))
    sms: ChannelResult = Field(default_factory=lambda: ChannelResult(channel="clinician_sms"))


class SubmissionResult(BaseModel):
    """Response for a processed check-in. ``ok`` is true whatever the channels did."""
    ok: bool = True
    classification: SeverityTier
    outcome: DispatchOutcome


# ---------------------------------------------------------------------------
# REQUEST BODIES
# ---------------------------------------------------------------------------

class SendEmailRequest(BaseModel):
    email: str
    subject: str
    html: str


class SendSmsRequest(BaseModel):
    phone: str
    message: str


class AppointmentRequest(BaseModel):
    """Request body for booking a follow-up appointment."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    preferred_date: Optional[str] = None
    procedure: Optional[str] = None


class AppointmentResponse(BaseModel):
    id: str
    name: Optional[str] = None
    phone: Optional[str] = None
    date: Optional[str] = None
    procedure: Optional[str] = None
