"""This file contains the schemas for the application."""
from annexure.schemas.bills import BillDraft, BillLineItem, BillUpdate, BillsResponse, TotalResponse
from annexure.schemas.details import (
    PatientDetails,
    PatientDetailsUpdate,
    PolicyHolderDetails,
    PolicyHolderDetailsUpdate,
)
from annexure.schemas.extraction import (
    ExtractionResult,
    ExtractionOutcome,
    PopulatedExtraction,
    EmptyExtraction,
    FailedExtraction,
    ProgressState,
)
from annexure.schemas.anomaly import (
    AnomalyCheckOutcome,
    AnomalyCheckState,
    CompletedAnomalyCheck,
    FailedAnomalyCheck,
)
from annexure.schemas.report import AnnexureReport, ReportCell, ReportColumn, ReportHeaderLine

__all__ = [
    "BillDraft",
    "BillLineItem",
    "BillUpdate",
    "BillsResponse",
    "TotalResponse",
    "PatientDetails",
    "PatientDetailsUpdate",
    "PolicyHolderDetails",
    "PolicyHolderDetailsUpdate",
    "ExtractionResult",
    "ExtractionOutcome",
    "PopulatedExtraction",
    "EmptyExtraction",
    "FailedExtraction",
    "ProgressState",
    "AnomalyCheckOutcome",
    "AnomalyCheckState",
    "CompletedAnomalyCheck",
    "FailedAnomalyCheck",
    "AnnexureReport",
    "ReportCell",
    "ReportColumn",
    "ReportHeaderLine",
]
