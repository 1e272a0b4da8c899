"""Tests for the bill ledger and its edit sessions."""

import math

import pytest

from annexure.errors import BillValidationError, ValidationRejection
from annexure.schemas.bills import BillDraft, BillUpdate
from annexure.services.ledger import BillLedger, format_amount
from annexure.utils.amounts import MAX_BILL_AMOUNT


def draft(name="City Clinic", number="B-1", date="01-01-2024", amount=100.0) -> BillDraft:
    return BillDraft(biller_name=name, bill_number=number, bill_date=date, bill_amount=amount)


@pytest.fixture
def ledger() -> BillLedger:
    return BillLedger()


class TestFormatAmount:

    @pytest.mark.parametrize("amount, expected", [
        (350.25, "350.25"),
        (0, "0.00"),
        (5, "5.00"),
        (1234.5, "1,234.50"),
        (1234567.891, "1,234,567.89"),
        (0.125, "0.13"),
        (2.675, "2.68"),
        (999.995, "1,000.00"),
    ])
    def test_two_decimals_with_grouping(self, amount, expected):
        assert format_amount(amount) == expected

    def test_amounts_wider_than_the_default_precision(self):
        assert format_amount(1e30) == "1,000,000,000,000,000,000,000,000,000,000.00"
        assert format_amount(1.5e26) == "150,000,000,000,000,000,000,000,000.00"

    def test_non_finite_amount_is_refused(self):
        with pytest.raises(ValueError):
            format_amount(float("inf"))


class TestLoad:

    def test_assigns_unique_ids_in_order(self, ledger):
        bills = ledger.load([draft(name="A"), draft(name="B"), draft(name="A")])

        assert [bill.biller_name for bill in bills] == ["A", "B", "A"]
        assert len({bill.id for bill in bills}) == 3

    def test_replaces_previous_contents(self, ledger):
        ledger.load([draft(name="old")])
        ledger.load([draft(name="new")])
        assert [bill.biller_name for bill in ledger.list()] == ["new"]


class TestAdd:

    def test_appends_at_end(self, ledger):
        ledger.load([draft(name="first"), draft(name="second")])
        added = ledger.add(draft(name="third", amount=42))

        bills = ledger.list()
        assert [bill.biller_name for bill in bills] == ["first", "second", "third"]
        assert bills[-1].id == added.id
        assert added.id.startswith("bill-")

    @pytest.mark.parametrize("bad_draft, missing", [
        (draft(name=""), ["billerName"]),
        (draft(name="   "), ["billerName"]),
        (draft(date=""), ["billDate"]),
        (draft(amount=0), ["billAmount"]),
        (BillDraft(biller_name="X", bill_date="d", bill_amount="not a number"), ["billAmount"]),
        (BillDraft(), ["billerName", "billDate", "billAmount"]),
    ])
    def test_rejects_missing_required_fields(self, ledger, bad_draft, missing):
        ledger.add(draft())

        with pytest.raises(BillValidationError) as exc_info:
            ledger.add(bad_draft)

        assert exc_info.value.missing_fields == missing
        assert len(ledger) == 1

    def test_scenario_empty_biller_name_is_rejected(self, ledger):
        with pytest.raises(ValidationRejection):
            ledger.add(BillDraft(biller_name="", bill_date="2024-01-01", bill_amount=10))
        assert len(ledger) == 0

    def test_bill_number_is_optional(self, ledger):
        bill = ledger.add(draft(number=""))
        assert bill.bill_number == ""


class TestUpdateDelete:

    def test_update_replaces_fields_in_place(self, ledger):
        first, second, third = ledger.load([draft(name="A"), draft(name="B"), draft(name="C")])

        assert ledger.update(second.id, draft(name="B2", number="N2", date="02-02-2024", amount=7))

        bills = ledger.list()
        assert [bill.id for bill in bills] == [first.id, second.id, third.id]
        assert bills[1].model_dump() == {
            "id": second.id,
            "biller_name": "B2",
            "bill_number": "N2",
            "bill_date": "02-02-2024",
            "bill_amount": 7.0,
        }

    def test_update_missing_id_is_noop(self, ledger):
        ledger.load([draft(name="A")])
        before = ledger.list()

        assert ledger.update("bill-gone", draft(name="Z")) is False
        assert ledger.list() == before

    def test_delete(self, ledger):
        first, second = ledger.load([draft(name="A"), draft(name="B")])

        assert ledger.delete(first.id) is True
        assert ledger.delete(first.id) is False
        assert [bill.id for bill in ledger.list()] == [second.id]

    def test_returned_items_are_copies(self, ledger):
        (bill,) = ledger.load([draft(name="A")])
        bill.biller_name = "mutated"
        assert ledger.get(bill.id).biller_name == "A"


class TestTotal:

    def test_scenario_total(self, ledger):
        ledger.load([draft(amount=100.00), draft(amount=250.25)])
        assert ledger.total() == 350.25
        assert format_amount(ledger.total()) == "350.25"

    def test_empty_total_is_zero(self, ledger):
        assert ledger.total() == 0

    def test_oversized_amounts_cannot_overflow_the_total(self, ledger):
        ledger.load([draft(amount=1e308), draft(amount=1e308), draft(amount="1e30"), draft(amount=250.25)])

        assert [bill.bill_amount for bill in ledger.list()] == [0.0, 0.0, 0.0, 250.25]
        assert ledger.total() == 250.25
        assert format_amount(ledger.total()) == "250.25"

    def test_largest_accepted_amounts_still_total_and_format(self, ledger):
        ledger.load([draft(amount=MAX_BILL_AMOUNT)] * 3)

        assert ledger.total() == 3 * MAX_BILL_AMOUNT
        assert format_amount(ledger.total()) == "3,000,000,000,000.00"

    def test_total_tracks_every_mutation(self, ledger):
        bills = ledger.load([draft(amount=10.1), draft(amount=20.2), draft(amount=30.3)])
        extra = ledger.add(draft(amount=0.4))
        ledger.update(bills[1].id, draft(amount=5))
        ledger.delete(bills[0].id)

        expected = math.fsum(bill.bill_amount for bill in ledger.list())
        assert ledger.total() == pytest.approx(expected)
        assert ledger.total() == pytest.approx(30.3 + 5 + 0.4)

        for bill in ledger.list():
            ledger.delete(bill.id)
        assert ledger.total() == 0
        assert ledger.get(extra.id) is None


class TestEditSession:

    def test_begin_stage_save(self, ledger):
        (bill,) = ledger.load([draft(name="A", amount=10)])

        edit = ledger.begin_edit(bill.id)
        assert edit.snapshot.biller_name == "A"

        ledger.stage_edit(BillUpdate(biller_name="A Hospital", bill_amount="1,500.75"))
        saved = ledger.save_edit()

        assert saved.id == bill.id
        assert saved.biller_name == "A Hospital"
        assert saved.bill_amount == 1500.75
        assert ledger.active_edit is None

    def test_unparseable_staged_amount_becomes_zero(self, ledger):
        (bill,) = ledger.load([draft(amount=10)])
        ledger.begin_edit(bill.id)

        edit = ledger.stage_edit(BillUpdate(bill_amount="abc"))

        assert edit.draft.bill_amount == 0
        assert ledger.get(bill.id).bill_amount == 10

    def test_cancel_restores_snapshot(self, ledger):
        (bill,) = ledger.load([draft(name="A")])
        ledger.begin_edit(bill.id)
        ledger.stage_edit(BillUpdate(biller_name="changed"))

        snapshot = ledger.cancel_edit()

        assert snapshot.biller_name == "A"
        assert ledger.get(bill.id).biller_name == "A"
        assert ledger.active_edit is None

    def test_begin_on_missing_bill(self, ledger):
        assert ledger.begin_edit("bill-missing") is None
        assert ledger.active_edit is None

    def test_only_one_session_at_a_time(self, ledger):
        first, second = ledger.load([draft(name="A"), draft(name="B")])
        ledger.begin_edit(first.id)
        ledger.begin_edit(second.id)
        assert ledger.active_edit.bill_id == second.id

    def test_delete_mid_edit_closes_session(self, ledger):
        first, second = ledger.load([draft(name="A"), draft(name="B")])
        ledger.begin_edit(first.id)
        ledger.stage_edit(BillUpdate(biller_name="edited"))

        assert ledger.delete(first.id)

        assert ledger.active_edit is None
        assert ledger.save_edit() is None
        assert [bill.id for bill in ledger.list()] == [second.id]

    def test_direct_update_closes_session_on_same_row(self, ledger):
        (bill,) = ledger.load([draft(name="A", amount=10)])
        ledger.begin_edit(bill.id)
        ledger.stage_edit(BillUpdate(biller_name="stale draft"))

        assert ledger.update(bill.id, draft(name="A Hospital", amount=20))

        assert ledger.active_edit is None
        assert ledger.save_edit() is None
        assert ledger.get(bill.id).biller_name == "A Hospital"
        assert ledger.get(bill.id).bill_amount == 20

    def test_direct_update_of_other_row_keeps_session(self, ledger):
        first, second = ledger.load([draft(name="A"), draft(name="B")])
        ledger.begin_edit(first.id)
        ledger.update(second.id, draft(name="B2"))
        assert ledger.active_edit.bill_id == first.id

    def test_delete_other_row_keeps_session(self, ledger):
        first, second = ledger.load([draft(name="A"), draft(name="B")])
        ledger.begin_edit(first.id)
        ledger.delete(second.id)
        assert ledger.active_edit.bill_id == first.id

    def test_vanished_row_is_discarded_silently(self, ledger):
        (bill,) = ledger.load([draft(name="A")])
        ledger.begin_edit(bill.id)
        ledger.clear()

        assert ledger.stage_edit(BillUpdate(biller_name="X")) is None
        assert ledger.save_edit() is None
        assert ledger.cancel_edit() is None
        assert len(ledger) == 0

    def test_new_row_goes_through_add(self, ledger):
        ledger.load([draft(name="A")])
        edit = ledger.begin_edit()
        assert edit.is_new_row

        ledger.stage_edit(BillUpdate(biller_name="Pharmacy", bill_date="03-03-2024", bill_amount="80"))
        added = ledger.save_edit()

        assert [bill.biller_name for bill in ledger.list()] == ["A", "Pharmacy"]
        assert added.bill_amount == 80
        assert ledger.active_edit is None

    def test_incomplete_new_row_stays_open(self, ledger):
        ledger.begin_edit()
        ledger.stage_edit(BillUpdate(biller_name="Pharmacy"))

        with pytest.raises(BillValidationError):
            ledger.save_edit()

        assert len(ledger) == 0
        assert ledger.active_edit is not None
        assert ledger.active_edit.draft.biller_name == "Pharmacy"
