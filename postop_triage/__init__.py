"""Post-operative check-in triage and notification backend."""

from .classifier import classify, summarize
from .dispatcher import Dispatcher
from .models import SeverityTier
from .schemas import ChannelResult, DispatchOutcome, IntakeRecord

__all__ = [
    "classify",
    "summarize",
    "Dispatcher",
    "SeverityTier",
    "ChannelResult",
    "DispatchOutcome",
    "IntakeRecord",
]
