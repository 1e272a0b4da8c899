"""Bill ledger routes: list, add, update, delete and row edit sessions."""

import logging
from fastapi import APIRouter, Depends, HTTPException, Response, status

from annexure.errors import BillValidationError
from annexure.schemas.bills import (
    BillDraft,
    BillLineItem,
    BillsResponse,
    BillUpdate,
    EditSessionRequest,
    EditSessionResponse,
    TotalResponse,
)
from annexure.services.ledger import ActiveEdit, format_amount
from annexure.services.session import SessionContext, get_session

logger = logging.getLogger(__name__)
router = APIRouter(tags=["bills"])


def _edit_response(edit: ActiveEdit) -> EditSessionResponse:
    return EditSessionResponse(
        bill_id=edit.bill_id,
        is_new_row=edit.is_new_row,
        snapshot=edit.snapshot,
        draft=edit.draft,
    )


def _validation_error(e: BillValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": str(e), "missingFields": e.missing_fields},
    )


@router.get("", response_model=BillsResponse)
async def list_bills_endpoint(session: SessionContext = Depends(get_session)) -> BillsResponse:
    total = session.ledger.total()
    return BillsResponse(
        bills=session.ledger.list(),
        total=total,
        formatted_total=format_amount(total),
    )


@router.post("", response_model=BillLineItem, status_code=status.HTTP_201_CREATED)
async def add_bill_endpoint(
    draft: BillDraft,
    session: SessionContext = Depends(get_session),
) -> BillLineItem:
    """Append a bill. Biller name, bill date and a non-zero amount are required."""
    try:
        return session.ledger.add(draft)
    except BillValidationError as e:
        raise _validation_error(e)


@router.get("/total", response_model=TotalResponse)
async def get_total_endpoint(session: SessionContext = Depends(get_session)) -> TotalResponse:
    total = session.ledger.total()
    return TotalResponse(count=len(session.ledger), total=total, formatted_total=format_amount(total))


@router.get("/edit", response_model=EditSessionResponse)
async def get_edit_session_endpoint(session: SessionContext = Depends(get_session)) -> EditSessionResponse:
    edit = session.ledger.active_edit
    if edit is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No edit session is open")
    return _edit_response(edit)


@router.post("/edit", response_model=EditSessionResponse, status_code=status.HTTP_201_CREATED)
async def begin_edit_session_endpoint(
    request: EditSessionRequest,
    session: SessionContext = Depends(get_session),
) -> EditSessionResponse:
    """Open an edit session on a bill, or on the new-bill row when billId is omitted."""
    edit = session.ledger.begin_edit(request.bill_id)
    if edit is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Bill {request.bill_id} not found")
    return _edit_response(edit)


@router.patch("/edit", response_model=EditSessionResponse)
async def stage_edit_endpoint(
    changes: BillUpdate,
    session: SessionContext = Depends(get_session),
) -> EditSessionResponse:
    edit = session.ledger.stage_edit(changes)
    if edit is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No edit session is open")
    return _edit_response(edit)


@router.post("/edit/save", response_model=BillLineItem)
async def save_edit_endpoint(session: SessionContext = Depends(get_session)) -> BillLineItem:
    try:
        bill = session.ledger.save_edit()
    except BillValidationError as e:
        raise _validation_error(e)

    if bill is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No edit session is open")
    return bill


@router.delete("/edit", response_model=BillDraft)
async def cancel_edit_endpoint(session: SessionContext = Depends(get_session)) -> BillDraft:
    """Close the edit session without saving; returns the pre-edit values."""
    snapshot = session.ledger.cancel_edit()
    if snapshot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No edit session is open")
    return snapshot


@router.get("/{bill_id}", response_model=BillLineItem)
async def get_bill_endpoint(bill_id: str, session: SessionContext = Depends(get_session)) -> BillLineItem:
    bill = session.ledger.get(bill_id)
    if bill is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Bill {bill_id} not found")
    return bill


@router.put("/{bill_id}", response_model=BillLineItem)
async def update_bill_endpoint(
    bill_id: str,
    draft: BillDraft,
    session: SessionContext = Depends(get_session),
) -> BillLineItem:
    if not session.ledger.update(bill_id, draft):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Bill {bill_id} not found")
    return session.ledger.get(bill_id)


@router.delete("/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bill_endpoint(bill_id: str, session: SessionContext = Depends(get_session)) -> Response:
    if not session.ledger.delete(bill_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Bill {bill_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
