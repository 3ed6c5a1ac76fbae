"""
classifier.py
=============
Rule-based severity triage for post-operative check-ins.

The rules are evaluated top to bottom and the first match wins:
 - RED    temperature >= 38.0 C, any reported bleeding, or pain >= 8
 - YELLOW pain >= 5 or temperature >= 37.5 C
 - GREEN  everything else

Unparseable numbers count as 0 and pain is not clamped to 0-10, so a
negative pain score never raises the tier on its own.
"""

from typing import Any, Mapping, Union

from .models import SeverityTier
from .schemas import IntakeRecord

RED_TEMPERATURE = 38.0
RED_PAIN = 8
YELLOW_TEMPERATURE = 37.5
YELLOW_PAIN = 5

RecordLike = Union[IntakeRecord, Mapping[str, Any], None]


def classify(record: RecordLike) -> SeverityTier:
    """Map a check-in to exactly one severity tier. Never raises."""
    rec = IntakeRecord.coerce(record)
    temperature = rec.temperature_c
    pain = rec.pain_score

    if temperature >= RED_TEMPERATURE or rec.has_bleeding or pain >= RED_PAIN:
        return SeverityTier.RED
    if pain >= YELLOW_PAIN or temperature >= YELLOW_TEMPERATURE:
        return SeverityTier.YELLOW
    return SeverityTier.GREEN


def _raw(value: Any) -> str:
    return "" if value is None else str(value)


def summarize(record: RecordLike) -> str:
    """One-line alert summary; absent fields render as empty strings."""
    rec = IntakeRecord.coerce(record)
    return (
        f"Name: {_raw(rec.name)}; Phone: {_raw(rec.phone)}; "
        f"Temp:{_raw(rec.temperature)}; Pain:{_raw(rec.pain_level)}; "
        f"Bleeding:{_raw(rec.bleeding)}; Symptoms:{_raw(rec.symptoms)}"
    )
