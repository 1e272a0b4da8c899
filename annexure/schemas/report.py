"""Report projection handed to the PDF renderer."""

from typing import List, Literal
from pydantic import Field

from annexure.schemas.base import CamelModel

Alignment = Literal["left", "center", "right"]


class ReportHeaderLine(CamelModel):
    """Bold label followed by a value, above the table."""

    label: str
    value: str


class ReportColumn(CamelModel):
    """Table column heading."""

    title: str
    align: Alignment = "left"


class ReportCell(CamelModel):
    """Single table cell with its styling directives."""

    content: str
    col_span: int = Field(1, ge=1)
    align: Alignment = "left"
    bold: bool = False


class AnnexureReport(CamelModel):
    """Structured rows, columns and styles for the Annexure-I document."""

    title: str = "Annexure-I"
    header: List[ReportHeaderLine] = Field(default_factory=list)
    columns: List[ReportColumn] = Field(default_factory=list)
    rows: List[List[ReportCell]] = Field(default_factory=list)
    footer: List[ReportCell] = Field(default_factory=list)
    head_fill_color: str = "#007BFF"
    foot_fill_color: str = "#F1F3F5"
    foot_text_color: str = "#000000"
