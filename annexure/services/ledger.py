"""Bill ledger: the authoritative, mutable store of bill line items."""

import logging
import math
import uuid
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Iterable, List, Optional

from annexure.errors import BillValidationError
from annexure.schemas.bills import BillDraft, BillLineItem, BillUpdate

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def format_amount(amount: float) -> str:
    """
    Render an amount with two decimals and thousands grouping.

    Rounds half away from zero on the decimal value, e.g. 1234.5 -> '1,234.50'
    and 0.125 -> '0.13'. The bill table and the exported report both use
    this function.
    """
    value = Decimal(str(amount))
    if not value.is_finite():
        raise ValueError(f"Cannot format non-finite amount: {amount!r}")

    # Enough digits for every integer place plus the two decimals
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        value = value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"{value:,.2f}"


def new_bill_id() -> str:
    """Generate an opaque unique bill identifier."""
    return f"bill-{uuid.uuid4().hex}"


@dataclass
class ActiveEdit:
    """The single open edit session.

    Attributes:
        bill_id: Bill being edited, or None for the new-bill row
        snapshot: Field values before the edit started, restored on cancel
        draft: Values staged so far
    """

    bill_id: Optional[str]
    snapshot: BillDraft
    draft: BillDraft

    @property
    def is_new_row(self) -> bool:
        return self.bill_id is None


class BillLedger:
    """Ordered collection of bills plus the currently open edit, if any.

    Items are kept in insertion order. Callers only ever receive copies, so
    every mutation goes through add, update, delete or the edit session.
    """

    def __init__(self):
        self._bills: List[BillLineItem] = []
        self._active_edit: Optional[ActiveEdit] = None

    def __len__(self) -> int:
        return len(self._bills)

    def _index_of(self, bill_id: str) -> Optional[int]:
        for index, bill in enumerate(self._bills):
            if bill.id == bill_id:
                return index
        return None

    def list(self) -> List[BillLineItem]:
        """Copies of every bill, in ledger order."""
        return [bill.model_copy() for bill in self._bills]

    def get(self, bill_id: str) -> Optional[BillLineItem]:
        index = self._index_of(bill_id)
        return None if index is None else self._bills[index].model_copy()

    def load(self, drafts: Iterable[BillDraft]) -> List[BillLineItem]:
        """Replace the contents with freshly identified bills, keeping order."""
        self._bills = [
            BillLineItem(id=new_bill_id(), **draft.model_dump())
            for draft in drafts
        ]
        self._active_edit = None
        logger.info(f"Ledger loaded with {len(self._bills)} bill(s)")
        return self.list()

    def clear(self) -> None:
        self._bills = []
        self._active_edit = None

    def add(self, draft: BillDraft) -> BillLineItem:
        """
        Append a new bill.

        Raises:
            BillValidationError: If biller name or bill date is blank, or the amount is zero
        """
        missing = []
        if not draft.biller_name.strip():
            missing.append("billerName")
        if not draft.bill_date.strip():
            missing.append("billDate")
        if not draft.bill_amount:
            missing.append("billAmount")
        if missing:
            logger.warning(f"Rejected bill with missing fields: {missing}")
            raise BillValidationError(missing)

        bill = BillLineItem(id=new_bill_id(), **draft.model_dump())
        self._bills.append(bill)
        logger.info(f"Added bill {bill.id} from {bill.biller_name}")
        return bill.model_copy()

    def update(self, bill_id: str, draft: BillDraft) -> bool:
        """
        Replace every field except the id in place. Returns False if the bill is gone.

        An edit session open on the same bill is closed, so its stale draft
        can never overwrite this update.
        """
        index = self._index_of(bill_id)
        if index is None:
            logger.info(f"Update ignored, bill {bill_id} no longer exists")
            return False

        self._bills[index] = BillLineItem(id=bill_id, **draft.model_dump())
        if self._active_edit is not None and self._active_edit.bill_id == bill_id:
            logger.info(f"Closing edit session on updated bill {bill_id}")
            self._active_edit = None
        logger.debug(f"Updated bill {bill_id}")
        return True

    def delete(self, bill_id: str) -> bool:
        """Remove a bill. An edit open on it is closed without saving."""
        index = self._index_of(bill_id)
        if index is None:
            return False

        del self._bills[index]
        if self._active_edit is not None and self._active_edit.bill_id == bill_id:
            logger.info(f"Closing edit session on deleted bill {bill_id}")
            self._active_edit = None
        logger.info(f"Deleted bill {bill_id}")
        return True

    def total(self) -> float:
        """Sum of every bill amount, computed on each call; finite because amounts are capped."""
        return math.fsum(bill.bill_amount for bill in self._bills)

    # Edit session

    def _reconcile_edit(self) -> Optional[ActiveEdit]:
        edit = self._active_edit
        if edit is not None and not edit.is_new_row and self._index_of(edit.bill_id) is None:
            logger.debug(f"Discarding edit session on vanished bill {edit.bill_id}")
            self._active_edit = None
        return self._active_edit

    @property
    def active_edit(self) -> Optional[ActiveEdit]:
        return self._reconcile_edit()

    def begin_edit(self, bill_id: Optional[str] = None) -> Optional[ActiveEdit]:
        """
        Open an edit session on a bill, or on the new-bill row when bill_id is None.

        Any session already open is replaced. Returns None if the bill does not exist.
        """
        if bill_id is None:
            snapshot = BillDraft()
        else:
            bill = self.get(bill_id)
            if bill is None:
                return None
            snapshot = bill.to_draft()

        self._active_edit = ActiveEdit(
            bill_id=bill_id,
            snapshot=snapshot,
            draft=snapshot.model_copy(),
        )
        return self._active_edit

    def stage_edit(self, changes: BillUpdate) -> Optional[ActiveEdit]:
        """Apply field changes to the open session's draft."""
        edit = self._reconcile_edit()
        if edit is None:
            return None

        updates = changes.model_dump(exclude_none=True)
        edit.draft = BillDraft.model_validate({**edit.draft.model_dump(), **updates})
        return edit

    def save_edit(self) -> Optional[BillLineItem]:
        """
        Commit the open session.

        The new-bill row goes through add and stays open if validation fails.

        Raises:
            BillValidationError: If the new-bill draft is incomplete
        """
        edit = self._reconcile_edit()
        if edit is None:
            return None

        if edit.is_new_row:
            bill = self.add(edit.draft)
        else:
            self.update(edit.bill_id, edit.draft)
            bill = self.get(edit.bill_id)

        self._active_edit = None
        return bill

    def cancel_edit(self) -> Optional[BillDraft]:
        """Close the open session without saving and return its snapshot."""
        edit = self._reconcile_edit()
        self._active_edit = None
        return None if edit is None else edit.snapshot
