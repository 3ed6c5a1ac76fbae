"""
models.py
=========
Severity tiers and SQLAlchemy ORM tables for the post-op triage backend.
Contains:
 - SeverityTier (RED / YELLOW / GREEN)
 - Submission   (raw check-in payloads, append-only)
 - Appointment  (follow-up bookings)
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import declarative_base
import datetime
import enum

# SQLAlchemy Base class
Base = declarative_base()


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)

# ---------------------------------------------------------------------------
# ENUM DEFINITIONS
# ---------------------------------------------------------------------------

class SeverityTier(str, enum.Enum):
    """Urgency of a post-operative check-in."""
    RED = "red"          # emergency
    YELLOW = "yellow"    # needs follow-up
    GREEN = "green"      # stable


# ---------------------------------------------------------------------------
# TABLE DEFINITIONS
# ---------------------------------------------------------------------------

class Submission(Base):
    """One raw form submission, stored exactly as received."""
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True)
    payload = Column(Text, nullable=False)  # JSON
    received_at = Column(DateTime, default=_utcnow)


class Appointment(Base):
    """A follow-up appointment created from a patient request."""
    __tablename__ = "appointments"

    id = Column(String, primary_key=True)  # APPT-<epoch ms>-<4 hex>
    name = Column(String)
    phone = Column(String)
    email = Column(String, nullable=True)
    date = Column(String)
    procedure = Column(String)
    created_at = Column(DateTime, default=_utcnow)
