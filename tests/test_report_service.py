"""Tests for the Annexure-I report projection."""

import json

from annexure.schemas.bills import BillDraft
from annexure.services.extraction_schema import parse_extraction_response
from annexure.services.ledger import format_amount
from annexure.services.report_service import compile_annexure


def _load(session, amounts):
    return session.ledger.load([
        BillDraft(biller_name=f"Biller {index}", bill_number=f"N{index}", bill_date="05-06-2024", bill_amount=amount)
        for index, amount in enumerate(amounts, start=1)
    ])


def test_header_columns_rows_and_footer(session):
    _load(session, [100.0, 250.25])
    session.patient = session.patient.model_copy(update={"name": "A"})
    session.policy_holder = session.policy_holder.model_copy(update={"policy_number": "P1"})

    report = compile_annexure(session)

    assert report.title == "Annexure-I"
    assert [(line.label, line.value) for line in report.header] == [("Patient Name:", "A"), ("Policy No:", "P1")]
    assert [column.title for column in report.columns] == [
        "Sr. No.", "Biller Name", "Bill Number", "Bill Date", "Bill Amount",
    ]
    assert report.columns[-1].align == "right"

    assert [[cell.content for cell in row] for row in report.rows] == [
        ["1", "Biller 1", "N1", "05-06-2024", "100.00"],
        ["2", "Biller 2", "N2", "05-06-2024", "250.25"],
    ]
    assert all(row[-1].align == "right" for row in report.rows)

    label, amount = report.footer
    assert (label.content, label.col_span, label.align, label.bold) == ("Total", 4, "right", True)
    assert (amount.content, amount.align, amount.bold) == ("350.25", "right", True)


def test_follows_ledger_order_after_edits(session):
    first, second, third = _load(session, [1, 2, 3])
    session.ledger.delete(first.id)
    session.ledger.add(BillDraft(biller_name="Late", bill_date="d", bill_amount=1234.5))

    report = compile_annexure(session)

    assert [row[1].content for row in report.rows] == ["Biller 2", "Biller 3", "Late"]
    assert [row[0].content for row in report.rows] == ["1", "2", "3"]
    assert report.rows[-1][-1].content == "1,234.50"
    assert report.footer[-1].content == format_amount(session.ledger.total()) == "1,239.50"


def test_empty_ledger(session):
    report = compile_annexure(session)

    assert report.rows == []
    assert report.footer[-1].content == "0.00"
    assert report.header[0].value == ""


def test_compiling_does_not_mutate(session):
    _load(session, [10, 20])
    before = session.ledger.list()

    compile_annexure(session)

    assert session.ledger.list() == before


def test_oversized_extracted_amount_still_compiles(session):
    result = parse_extraction_response(json.dumps({
        "bills": [
            {"billerName": "X", "billNumber": "1", "billDate": "d", "billAmount": "1e30"},
            {"billerName": "Y", "billNumber": "2", "billDate": "d", "billAmount": 75},
        ],
        "patientDetails": {},
        "policyHolderDetails": {},
    }))
    session.ledger.load(result.bills)

    report = compile_annexure(session)

    assert [row[-1].content for row in report.rows] == ["0.00", "75.00"]
    assert report.footer[-1].content == "75.00"
