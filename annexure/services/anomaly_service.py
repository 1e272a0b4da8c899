"""Anomaly check: ask the vision model for a free-form fraud and consistency review."""

import logging
from typing import Any, Dict, List, Optional

from annexure.config.settings import get_settings
from annexure.errors import AnomalyCheckBusyError
from annexure.schemas.anomaly import AnomalyCheckOutcome, CompletedAnomalyCheck, FailedAnomalyCheck
from annexure.services.extraction_service import Rasterizer
from annexure.services.session import SessionContext
from annexure.services.vision_client import VisionClient, build_vision_messages
from annexure.utils.pdf_service import convert_pdf_bytes_to_images

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert fraud detection analyst for a health insurance company."

NO_DOCUMENT_MESSAGE = "No file is available to check."
CHECK_FAILED_MESSAGE = "An error occurred while checking the document for anomalies."


def get_anomaly_prompt() -> str:
    """Generate the anomaly check instruction."""

    return """
Analyze these medical bill documents carefully. Look for any signs of potential fraud, inconsistencies, or anomalies.
Check for:
- Mismatched patient names, addresses, or dates between different bills.
- Unusually high costs for standard procedures compared to typical rates.
- Signs of document alteration (e.g., misaligned text, different fonts in the same section, blurry numbers).
- Services or treatments listed that don't logically match the diagnosis or hospital type.
- Duplicate billing for the same service on different dates or bills.
- Any other detail that seems suspicious or out of place.

Provide a concise, bulleted summary of your findings.
If everything looks normal and consistent, state that "No anomalies or signs of fraud were detected."
"""


def build_anomaly_request(image_bytes_list: List[bytes], model: Optional[str] = None) -> Dict[str, Any]:
    """Build the OpenRouter payload for the anomaly check (free-form reply)."""
    return {
        "model": model or get_settings().anomaly_model,
        "messages": build_vision_messages(SYSTEM_PROMPT, get_anomaly_prompt(), image_bytes_list),
    }


class AnomalyCheckOrchestrator:
    """Runs anomaly checks against the document retained by the session."""

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

    async def check(self) -> AnomalyCheckOutcome:
        """
        Request advisory text for the current document.

        The outcome is stored on the session only if the same document is
        still current when the check settles.

        Raises:
            AnomalyCheckBusyError: If another check has not settled yet
        """
        session = self.session
        if session.anomaly_check_in_progress:
            raise AnomalyCheckBusyError("An anomaly check is already running")

        session.anomaly_check_in_progress = True
        session.anomaly_result = None
        try:
            outcome = await self._attempt()
        finally:
            session.anomaly_check_in_progress = False

        if outcome.document_id == session.document_id:
            session.anomaly_result = outcome
        else:
            logger.info("Anomaly check settled for a document that is no longer current")
        return outcome

    async def _attempt(self) -> AnomalyCheckOutcome:
        document = self.session.document
        document_id = self.session.document_id
        if document is None or document_id is None:
            logger.warning("Anomaly check requested with no document available")
            return FailedAnomalyCheck(reason=NO_DOCUMENT_MESSAGE)

        try:
            logger.info("Re-rendering document pages for anomaly check")
            image_bytes_list = await self.rasterizer(document)

            payload = build_anomaly_request(image_bytes_list, model=self.model)
            advisory = await self.vision_client.complete(payload)
        except Exception as e:
            logger.error(f"Error during anomaly check: {str(e)}", exc_info=True)
            return FailedAnomalyCheck(document_id=document_id, reason=CHECK_FAILED_MESSAGE)

        if not advisory or not advisory.strip():
            logger.warning("Anomaly check returned no text")
            return FailedAnomalyCheck(document_id=document_id, reason=CHECK_FAILED_MESSAGE)

        logger.info(f"Anomaly check completed: {len(advisory)} characters")
        return CompletedAnomalyCheck(document_id=document_id, advisory=advisory)

    def dismiss(self) -> None:
        """Forget the latest advisory (the modal was closed)."""
        self.session.anomaly_result = None
