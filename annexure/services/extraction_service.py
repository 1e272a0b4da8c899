"""Extraction orchestrator: rasterize the upload, extract with AI, seed the session."""

import logging
from typing import Awaitable, Callable, List, Optional

from annexure.errors import ExtractionBusyError
from annexure.schemas.extraction import (
    EmptyExtraction,
    ExtractionOutcome,
    FailedExtraction,
    PopulatedExtraction,
)
from annexure.services.extraction_schema import build_extraction_request, parse_extraction_response
from annexure.services.session import SessionContext
from annexure.services.vision_client import VisionClient
from annexure.utils.pdf_service import PageProgressCallback, convert_pdf_bytes_to_images

logger = logging.getLogger(__name__)

Rasterizer = Callable[..., Awaitable[List[bytes]]]

# Share of the progress bar spent on page rendering; the rest covers the AI call
RASTERIZE_PROGRESS_SHARE = 75.0
REQUEST_ISSUED_PROGRESS = 80.0


class ExtractionOrchestrator:
    """Runs one extraction attempt per upload against a session."""

    def __init__(
        self,
        session: SessionContext,
        rasterizer: Rasterizer = convert_pdf_bytes_to_images,
        vision_client: Optional[VisionClient] = None,
        model: Optional[str] = None,
    ):
        self.session = session
        self.rasterizer = rasterizer
        self.vision_client = vision_client or VisionClient()
        self.model = model

    def _page_progress(self) -> PageProgressCallback:
        def on_page_progress(fraction_done: float) -> None:
            self.session.progress.advance(RASTERIZE_PROGRESS_SHARE * fraction_done)

        return on_page_progress

    async def run(self, document: bytes, file_name: Optional[str] = None) -> ExtractionOutcome:
        """
        Process an uploaded document.

        The session is cleared before anything else happens, so a failed
        attempt never leaves stale bills or identity records behind.

        Args:
            document: PDF bytes
            file_name: Original file name, for display only

        Returns:
            PopulatedExtraction, EmptyExtraction or FailedExtraction

        Raises:
            ExtractionBusyError: If another extraction has not settled yet
        """
        session = self.session
        if session.extraction_in_progress:
            logger.warning(f"Rejected upload of {file_name}: an extraction is already running")
            raise ExtractionBusyError("A document is already being processed")

        session.extraction_in_progress = True
        try:
            session.reset(file_name)
            return await self._attempt(document, file_name)
        finally:
            session.extraction_in_progress = False

    async def _attempt(self, document: bytes, file_name: Optional[str]) -> ExtractionOutcome:
        session = self.session
        progress = session.progress

        try:
            logger.info(f"=== EXTRACTION STARTED: {file_name} ===")
            progress.advance(0, "Processing PDF pages...")
            image_bytes_list = await self.rasterizer(document, on_page_progress=self._page_progress())
            logger.info(f"Step 1: Converted PDF to {len(image_bytes_list)} image(s)")

            progress.advance(REQUEST_ISSUED_PROGRESS, "Extracting information with AI...")
            payload = build_extraction_request(image_bytes_list, model=self.model)
            raw_response = await self.vision_client.complete(payload)
            logger.info("Step 2: Extraction response received")

            progress.advance(100, "Analysis complete!")
            result = parse_extraction_response(raw_response)

        except Exception as e:
            logger.error(f"Error processing PDF or calling the vision model: {str(e)}", exc_info=True)
            outcome = FailedExtraction()
            session.last_error = outcome.reason
            return outcome

        if not result.bills:
            logger.warning(f"No bills extracted from {file_name}")
            outcome = EmptyExtraction()
            session.last_error = outcome.message
            return outcome

        bills = session.ledger.load(result.bills)
        session.patient = result.patient_details
        session.policy_holder = result.policy_holder_details
        session.retain_document(document)

        logger.info(f"=== EXTRACTION COMPLETED: {len(bills)} bill(s) from {file_name} ===")
        return PopulatedExtraction(
            file_name=file_name,
            bills=bills,
            patient_details=session.patient,
            policy_holder_details=session.policy_holder,
        )
