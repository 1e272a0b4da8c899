"""Bill schemas for extracted and user-edited line items."""

from typing import Any, List, Optional
from pydantic import Field, field_validator

from annexure.schemas.base import CamelModel
from annexure.utils.amounts import coerce_amount, coerce_text


class BillDraft(CamelModel):
    """Bill line item fields without an identifier."""

    biller_name: str = Field("", description="Name of the hospital, clinic, or pharmacy")
    bill_number: str = Field("", description="The unique invoice or bill number")
    bill_date: str = Field("", description="Date the bill was issued (DD-MM-YYYY)")
    bill_amount: float = Field(0.0, ge=0, description="Final total amount due on the bill")

    @field_validator("biller_name", "bill_number", "bill_date", mode="before")
    @classmethod
    def validate_text(cls, v: Any) -> str:
        """Absent or non-string values become strings."""
        return coerce_text(v)

    @field_validator("bill_amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> float:
        """Unparseable amounts become 0."""
        return coerce_amount(v)


class BillLineItem(BillDraft):
    """A bill owned by the ledger."""

    id: str = Field(..., frozen=True, description="Opaque unique identifier")

    def to_draft(self) -> BillDraft:
        """Copy of the editable fields."""
        return BillDraft.model_validate(self.model_dump(exclude={"id"}))


class BillUpdate(CamelModel):
    """Partial bill change staged into an open edit session."""

    biller_name: Optional[str] = None
    bill_number: Optional[str] = None
    bill_date: Optional[str] = None
    bill_amount: Optional[Any] = None


class BillsResponse(CamelModel):
    """Current ledger contents with the derived total."""

    bills: List[BillLineItem] = Field(default_factory=list)
    total: float = Field(0.0, description="Sum of every bill amount")
    formatted_total: str = Field("0.00", description="Total rendered with the shared amount format")


class TotalResponse(CamelModel):
    """Derived ledger total."""

    count: int
    total: float
    formatted_total: str


class EditSessionRequest(CamelModel):
    """Open an edit session; a missing bill id targets the new-bill row."""

    bill_id: Optional[str] = None


class EditSessionResponse(CamelModel):
    """The open edit session."""

    bill_id: Optional[str] = None
    is_new_row: bool
    snapshot: BillDraft
    draft: BillDraft
