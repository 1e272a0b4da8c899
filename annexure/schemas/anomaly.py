"""Schemas for the anomaly check."""

from typing import Literal, Optional, Union

from annexure.schemas.base import CamelModel


class CompletedAnomalyCheck(CamelModel):
    """Advisory text returned verbatim by the remote model."""

    status: Literal["completed"] = "completed"
    document_id: str
    advisory: str


class FailedAnomalyCheck(CamelModel):
    """The anomaly check could not be performed."""

    status: Literal["failed"] = "failed"
    document_id: Optional[str] = None
    reason: str


AnomalyCheckOutcome = Union[CompletedAnomalyCheck, FailedAnomalyCheck]


class AnomalyCheckState(CamelModel):
    """What the advisory modal shows."""

    checking: bool = False
    result: Optional[AnomalyCheckOutcome] = None
