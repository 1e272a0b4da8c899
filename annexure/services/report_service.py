"""Report compiler: project the session into the Annexure-I table layout."""

import logging
from typing import List

from annexure.schemas.bills import BillLineItem
from annexure.schemas.report import AnnexureReport, ReportCell, ReportColumn, ReportHeaderLine
from annexure.services.ledger import format_amount
from annexure.services.session import SessionContext

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    ReportColumn(title="Sr. No."),
    ReportColumn(title="Biller Name"),
    ReportColumn(title="Bill Number"),
    ReportColumn(title="Bill Date"),
    ReportColumn(title="Bill Amount", align="right"),
]


def _bill_row(position: int, bill: BillLineItem) -> List[ReportCell]:
    return [
        ReportCell(content=str(position)),
        ReportCell(content=bill.biller_name),
        ReportCell(content=bill.bill_number),
        ReportCell(content=bill.bill_date),
        ReportCell(content=format_amount(bill.bill_amount), align="right"),
    ]


def compile_annexure(session: SessionContext) -> AnnexureReport:
    """Build the report projection from the current ledger and identity records."""
    bills = session.ledger.list()
    total = session.ledger.total()

    report = AnnexureReport(
        header=[
            ReportHeaderLine(label="Patient Name:", value=session.patient.name),
            ReportHeaderLine(label="Policy No:", value=session.policy_holder.policy_number),
        ],
        columns=[column.model_copy() for column in REPORT_COLUMNS],
        rows=[_bill_row(index + 1, bill) for index, bill in enumerate(bills)],
        footer=[
            ReportCell(content="Total", col_span=len(REPORT_COLUMNS) - 1, align="right", bold=True),
            ReportCell(content=format_amount(total), align="right", bold=True),
        ],
    )
    logger.info(f"Compiled annexure with {len(report.rows)} row(s), total {format_amount(total)}")
    return report
