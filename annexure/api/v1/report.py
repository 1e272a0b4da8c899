"""Annexure-I report routes."""

import logging
from fastapi import APIRouter, Depends, HTTPException, Response, status

from annexure.errors import DocumentProcessingError
from annexure.schemas.report import AnnexureReport
from annexure.services.report_service import compile_annexure
from annexure.services.session import SessionContext, get_session
from annexure.utils.pdf_service import render_annexure_pdf

logger = logging.getLogger(__name__)
router = APIRouter(tags=["report"])


@router.get("", response_model=AnnexureReport)
async def get_report_endpoint(session: SessionContext = Depends(get_session)) -> AnnexureReport:
    """The structured rows, columns and styles of the Annexure-I report."""
    return compile_annexure(session)


@router.get("/pdf")
async def get_report_pdf_endpoint(session: SessionContext = Depends(get_session)) -> Response:
    """Render the Annexure-I report as a PDF."""
    report = compile_annexure(session)

    try:
        pdf_bytes, page_count = await render_annexure_pdf(report)
    except DocumentProcessingError as e:
        logger.error(f"Error rendering annexure PDF: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate PDF: {str(e)}"
        )

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": 'inline; filename="annexure-i.pdf"',
            "X-Page-Count": str(page_count),
        },
    )
