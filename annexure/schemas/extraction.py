"""Schemas for extraction results and orchestrator outcomes."""

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from annexure.schemas.base import CamelModel
from annexure.schemas.bills import BillDraft, BillLineItem
from annexure.schemas.details import PatientDetails, PolicyHolderDetails


class ExtractionResult(CamelModel):
    """Normalized data returned by the remote extraction call."""

    bills: List[BillDraft] = Field(default_factory=list, description="Bills in document order")
    patient_details: PatientDetails = Field(default_factory=PatientDetails)
    policy_holder_details: PolicyHolderDetails = Field(default_factory=PolicyHolderDetails)


class AcceptedPayload(BaseModel):
    """Raw payload that passed structural validation."""

    status: Literal["accepted"] = "accepted"
    bills: List[Dict[str, Any]]
    patient_details: Dict[str, Any]
    policy_holder_details: Dict[str, Any]


class RejectedPayload(BaseModel):
    """Raw payload that failed structural validation."""

    status: Literal["rejected"] = "rejected"
    reason: str


ValidatedPayload = Union[AcceptedPayload, RejectedPayload]


class PopulatedExtraction(CamelModel):
    """Extraction found at least one bill; the session has been seeded."""

    status: Literal["populated"] = "populated"
    file_name: Optional[str] = None
    bills: List[BillLineItem]
    patient_details: PatientDetails
    policy_holder_details: PolicyHolderDetails


class EmptyExtraction(CamelModel):
    """Extraction succeeded but no bills were found."""

    status: Literal["empty"] = "empty"
    message: str = "No bills could be extracted from the provided PDF. Please try a different file."


class FailedExtraction(CamelModel):
    """Rasterization or the remote call failed."""

    status: Literal["failed"] = "failed"
    reason: str = (
        "An error occurred while processing the PDF. "
        "Please ensure it is a valid, unencrypted file and try again."
    )


ExtractionOutcome = Union[PopulatedExtraction, EmptyExtraction, FailedExtraction]


class ProgressState(CamelModel):
    """Snapshot of the extraction progress indicator."""

    value: float = Field(0.0, ge=0, le=100)
    message: str = ""
    file_name: Optional[str] = None
    busy: bool = False
    error: Optional[str] = None
