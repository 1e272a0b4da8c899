"""Document upload, extraction progress and anomaly check routes."""

import logging
from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from annexure.errors import AnomalyCheckBusyError, ExtractionBusyError
from annexure.schemas.anomaly import AnomalyCheckOutcome, AnomalyCheckState, FailedAnomalyCheck
from annexure.schemas.extraction import (
    EmptyExtraction,
    FailedExtraction,
    PopulatedExtraction,
    ProgressState,
)
from annexure.services.anomaly_service import NO_DOCUMENT_MESSAGE, AnomalyCheckOrchestrator
from annexure.services.extraction_service import ExtractionOrchestrator
from annexure.services.session import SessionContext, get_session

logger = logging.getLogger(__name__)
router = APIRouter(tags=["documents"])


def get_extraction_orchestrator(session: SessionContext = Depends(get_session)) -> ExtractionOrchestrator:
    return ExtractionOrchestrator(session)


def get_anomaly_orchestrator(session: SessionContext = Depends(get_session)) -> AnomalyCheckOrchestrator:
    return AnomalyCheckOrchestrator(session)


@router.post("", response_model=PopulatedExtraction, status_code=status.HTTP_200_OK)
async def upload_document_endpoint(
    file: UploadFile = File(...),
    orchestrator: ExtractionOrchestrator = Depends(get_extraction_orchestrator),
) -> PopulatedExtraction:
    """
    Upload a bill PDF and extract bills, patient and policy holder details.

    Any data from a previous document is discarded first. Returns 409 while
    another document is still being processed, 422 when no bills were found
    and 502 when the document could not be processed.
    """
    logger.info(f"Received document upload: {file.filename}")

    if not file.filename or not file.filename.lower().endswith(".pdf"):
        logger.warning(f"Invalid file type: {file.filename}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only PDF files are allowed"
        )

    try:
        pdf_bytes = await file.read()
        logger.info(f"PDF file read: {len(pdf_bytes)} bytes")
        outcome = await orchestrator.run(pdf_bytes, file_name=file.filename)
    except ExtractionBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if isinstance(outcome, EmptyExtraction):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=outcome.message)
    if isinstance(outcome, FailedExtraction):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=outcome.reason)

    return outcome


@router.get("/progress", response_model=ProgressState)
async def get_progress_endpoint(session: SessionContext = Depends(get_session)) -> ProgressState:
    """Current extraction progress (0-100) and status message."""
    return session.progress_state()


@router.post("/anomaly-check", response_model=AnomalyCheckOutcome)
async def run_anomaly_check_endpoint(
    orchestrator: AnomalyCheckOrchestrator = Depends(get_anomaly_orchestrator),
) -> AnomalyCheckOutcome:
    """Ask the vision model to review the current document for fraud or inconsistencies."""
    try:
        outcome = await orchestrator.check()
    except AnomalyCheckBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if isinstance(outcome, FailedAnomalyCheck):
        status_code = (
            status.HTTP_400_BAD_REQUEST
            if outcome.reason == NO_DOCUMENT_MESSAGE
            else status.HTTP_502_BAD_GATEWAY
        )
        raise HTTPException(status_code=status_code, detail=outcome.reason)

    return outcome


@router.get("/anomaly-check", response_model=AnomalyCheckState)
async def get_anomaly_check_endpoint(session: SessionContext = Depends(get_session)) -> AnomalyCheckState:
    """Whether a check is running and the latest advisory for the current document."""
    return session.anomaly_state()


@router.delete("/anomaly-check", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_anomaly_check_endpoint(
    orchestrator: AnomalyCheckOrchestrator = Depends(get_anomaly_orchestrator),
) -> Response:
    orchestrator.dismiss()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
