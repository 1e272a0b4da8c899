"""Exception hierarchy for the extraction and reconciliation pipeline."""

from typing import List


class AnnexureError(Exception):
    """Base class for all errors raised by the annexure package."""


class TransientServiceFailure(AnnexureError):
    """A remote call or document operation failed; the user may retry."""


class VisionServiceError(TransientServiceFailure):
    """The remote vision model could not be reached or replied unexpectedly."""


class DocumentProcessingError(TransientServiceFailure):
    """The uploaded document could not be rasterized."""


class MalformedResponseError(AnnexureError):
    """The extraction reply was not JSON at all."""


class ValidationRejection(AnnexureError):
    """User input was rejected before any mutation happened."""


class BillValidationError(ValidationRejection):
    """A bill could not be added because required fields are missing."""

    def __init__(self, missing_fields: List[str]):
        self.missing_fields = missing_fields
        super().__init__(
            "Please provide at least a Biller Name, Bill Date, and Bill Amount "
            f"(missing: {', '.join(missing_fields)})"
        )


class OperationInProgressError(AnnexureError):
    """An operation of the same kind is still in flight."""


class ExtractionBusyError(OperationInProgressError):
    """A document is already being processed."""


class AnomalyCheckBusyError(OperationInProgressError):
    """An anomaly check is already running."""
