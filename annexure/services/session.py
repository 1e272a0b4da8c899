"""Session context: everything known about the document currently being worked on."""

import logging
import uuid
from typing import Optional

from annexure.schemas.anomaly import AnomalyCheckOutcome, AnomalyCheckState
from annexure.schemas.details import (
    PatientDetails,
    PatientDetailsUpdate,
    PolicyHolderDetails,
    PolicyHolderDetailsUpdate,
)
from annexure.schemas.extraction import ProgressState
from annexure.services.ledger import BillLedger

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Extraction progress, clamped to 0..100 and never decreasing within an attempt."""

    def __init__(self):
        self.value = 0.0
        self.message = ""

    def reset(self) -> None:
        self.value = 0.0
        self.message = ""

    def advance(self, value: float, message: Optional[str] = None) -> float:
        value = min(max(float(value), 0.0), 100.0)
        self.value = max(self.value, value)
        if message is not None:
            self.message = message
        return self.value


class SessionContext:
    """State for a single document session.

    Holds the bill ledger, both identity records, the retained document used
    by the anomaly check, progress, and the busy flags guarding extraction
    and anomaly checks. `reset` is called at the start of every upload.
    """

    def __init__(self):
        self.ledger = BillLedger()
        self.patient = PatientDetails()
        self.policy_holder = PolicyHolderDetails()
        self.progress = ProgressTracker()

        self.document: Optional[bytes] = None
        self.document_id: Optional[str] = None
        self.file_name: Optional[str] = None
        self.last_error: Optional[str] = None
        self.anomaly_result: Optional[AnomalyCheckOutcome] = None

        self.extraction_in_progress = False
        self.anomaly_check_in_progress = False

    def reset(self, file_name: Optional[str] = None) -> None:
        """Clear everything derived from the previous document."""
        logger.info(f"Resetting session for new document: {file_name}")
        self.ledger.clear()
        self.patient = PatientDetails()
        self.policy_holder = PolicyHolderDetails()
        self.progress.reset()
        self.document = None
        self.document_id = None
        self.file_name = file_name
        self.last_error = None
        self.anomaly_result = None

    def retain_document(self, document: bytes) -> str:
        """Keep the processed document for later anomaly checks."""
        self.document = document
        self.document_id = uuid.uuid4().hex
        return self.document_id

    def update_patient(self, changes: PatientDetailsUpdate) -> PatientDetails:
        updates = changes.model_dump(exclude_none=True)
        self.patient = self.patient.model_copy(update=updates)
        return self.patient

    def update_policy_holder(self, changes: PolicyHolderDetailsUpdate) -> PolicyHolderDetails:
        updates = changes.model_dump(exclude_none=True)
        self.policy_holder = self.policy_holder.model_copy(update=updates)
        return self.policy_holder

    def progress_state(self) -> ProgressState:
        return ProgressState(
            value=self.progress.value,
            message=self.progress.message,
            file_name=self.file_name,
            busy=self.extraction_in_progress,
            error=self.last_error,
        )

    def anomaly_state(self) -> AnomalyCheckState:
        return AnomalyCheckState(
            checking=self.anomaly_check_in_progress,
            result=self.anomaly_result,
        )


_session: Optional[SessionContext] = None


def get_session() -> SessionContext:
    """Get the process-wide session instance."""
    global _session

    if _session is None:
        _session = SessionContext()

    return _session
