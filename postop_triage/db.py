"""
db.py
=====
SubmissionStore: the repository for raw check-ins and appointments.
Opened once at application startup and closed at shutdown; every
operation uses its own short-lived session, so concurrent appends need
no extra locking.
"""

import os
import json
import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from .models import Base, Submission, Appointment

logger = logging.getLogger(__name__)


class StoreClosed(RuntimeError):
    """Raised when the store is used before open() or after close()."""


class SubmissionStore:
    """Append-only store of raw submissions plus the appointment book."""

    def __init__(self, url: str, data_dir: Optional[str] = None):
        self.url = url
        self.data_dir = data_dir
        self._engine = None
        self._session_factory = None

    @classmethod
    def for_path(cls, db_path: str) -> "SubmissionStore":
        return cls(f"sqlite:///{db_path}", data_dir=os.path.dirname(db_path))

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    def open(self) -> "SubmissionStore":
        if self._engine is not None:
            return self
        # Create directory if it doesn't exist
        if self.data_dir and not os.path.exists(self.data_dir):
            os.makedirs(self.data_dir, exist_ok=True)
        connect_args = {"check_same_thread": False} if self.url.startswith("sqlite") else {}
        self._engine = create_engine(self.url, connect_args=connect_args)
        Base.metadata.create_all(bind=self._engine)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=self._engine)
        logger.info("🗄️ Submission store opened at %s", self.url)
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("🗄️ Submission store closed")

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def _session(self):
        if self._session_factory is None:
            raise StoreClosed("SubmissionStore is not open")
        return self._session_factory()

    # ------------------------------------------------------------------
    # SUBMISSIONS
    # ------------------------------------------------------------------

    def append(self, record: Dict[str, Any]) -> int:
        """Store one raw submission and return its row id."""
        db = self._session()
        try:
            row = Submission(payload=json.dumps(record, ensure_ascii=False, default=str))
            db.add(row)
            db.commit()
            db.refresh(row)
            return row.id
        finally:
            db.close()

    def list_submissions(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Stored payloads, oldest first."""
        db = self._session()
        try:
            query = db.query(Submission).order_by(Submission.id)
            if limit:
                query = query.limit(limit)
            return [json.loads(row.payload) for row in query.all()]
        finally:
            db.close()

    # ------------------------------------------------------------------
    # APPOINTMENTS
    # ------------------------------------------------------------------

    def add_appointment(self, appointment: Appointment) -> None:
        db = self._session()
        try:
            db.add(appointment)
            db.commit()
        finally:
            db.close()

    def get_appointment(self, appointment_id: str) -> Optional[Dict[str, Any]]:
        db = self._session()
        try:
            appt = db.get(Appointment, appointment_id)
            if appt is None:
                return None
            return {
                "id": appt.id,
                "name": appt.name,
                "phone": appt.phone,
                "email": appt.email,
                "date": appt.date,
                "procedure": appt.procedure,
            }
        finally:
            db.close()
