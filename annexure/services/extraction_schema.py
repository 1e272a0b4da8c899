"""Structured-output contract for bill extraction and normalization of its replies."""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from annexure.config.settings import get_settings
from annexure.errors import MalformedResponseError
from annexure.schemas.bills import BillDraft
from annexure.schemas.details import PatientDetails, PolicyHolderDetails
from annexure.schemas.extraction import (
    AcceptedPayload,
    ExtractionResult,
    RejectedPayload,
    ValidatedPayload,
)
from annexure.services.vision_client import build_vision_messages

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert at extracting structured data from scanned documents."


def _string(description: str) -> Dict[str, str]:
    return {"type": "string", "description": description}


EXTRACTION_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "patientDetails": {
            "type": "object",
            "description": "Details pertaining to the patient.",
            "properties": {
                "name": _string("The full name of the patient."),
                "admissionDate": _string("The date and time the patient was admitted. Include time if available."),
                "dischargeDate": _string("The date and time the patient was discharged. Include time if available."),
                "aadharNumber": _string("The patient's Aadhar card number, if available."),
                "panNumber": _string("The patient's PAN card number, if available."),
                "dateOfBirth": _string("The patient's date of birth, if available."),
                "gender": _string("The patient's gender, if available."),
            },
            "required": ["name", "admissionDate", "dischargeDate"],
        },
        "policyHolderDetails": {
            "type": "object",
            "description": "Details pertaining to the policy holder, who may be different from the patient.",
            "properties": {
                "name": _string("The full name of the policy holder."),
                "address": _string("The full mailing address of the policy holder."),
                "panNumber": _string("The policy holder's PAN card number."),
                "aadharNumber": _string("The policy holder's Aadhar card number."),
                "phoneNumber": _string("The policy holder's contact phone number."),
                "email": _string("The policy holder's email address."),
                "bankAccountNumber": _string("The bank account number for payment."),
                "bankName": _string("The name of the bank."),
                "chequeNumber": _string("The cheque number used for payment, if any."),
                "policyNumber": _string("The insurance policy number or member ID."),
            },
            "required": ["name", "policyNumber"],
        },
        "bills": {
            "type": "array",
            "description": "An array of bill objects extracted from the document.",
            "items": {
                "type": "object",
                "properties": {
                    "billerName": _string("Name of the hospital, clinic, or pharmacy."),
                    "billNumber": _string("The unique invoice or bill number."),
                    "billDate": _string("The date the bill was issued (Format: DD-MM-YYYY)."),
                    "billAmount": {"type": "number", "description": "The final total amount due on the bill."},
                },
                "required": ["billerName", "billNumber", "billDate", "billAmount"],
            },
        },
    },
    "required": ["patientDetails", "policyHolderDetails", "bills"],
}


def get_extraction_prompt() -> str:
    """Generate the instruction sent alongside the page images."""

    return """
Analyze the provided images, which are pages from a PDF of medical and hospital bills.
Your task is to populate two main sections: one for the patient and one for the policy holder. Note that these can be different people.

1. **Patient Details**: Extract all information related to the patient receiving care.
   - Name, Admission and Discharge Dates, Aadhar Number, PAN Number, Date of Birth, Gender.

2. **Policy Holder Details**: Extract all information related to the insurance policy holder.
   - Name, Address, PAN Number, Aadhar Number, Phone Number, Email, Bank Account Number, Bank Name, Cheque Number, and the Policy Number.

3. **Bills**: For each distinct bill you find, extract the following:
   - Biller Name: The name of the hospital, clinic, or pharmacy.
   - Bill Number: The unique invoice or bill number.
   - Bill Date: The date the bill was issued. Format as DD-MM-YYYY.
   - Bill Amount: The final total amount due on the bill.

IMPORTANT: Ensure the bills in the output array are in the same order as they appear in the document.
If a piece of information cannot be found, return an empty string for that field.
Provide the output in the specified JSON format.
"""


def build_extraction_request(image_bytes_list: List[bytes], model: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the OpenRouter payload for structured bill extraction.

    Args:
        image_bytes_list: Page images in document order
        model: Model identifier, defaults to the configured EXTRACTION_MODEL

    Returns:
        Request payload carrying the instruction, the images and the output schema
    """
    return {
        "model": model or get_settings().extraction_model,
        "messages": build_vision_messages(SYSTEM_PROMPT, get_extraction_prompt(), image_bytes_list),
        "response_format": {
            "type": "json_schema",
            "json_schema": {
                "name": "bill_extraction",
                "strict": False,
                "schema": EXTRACTION_RESPONSE_SCHEMA,
            },
        },
    }


_LEADING_FENCE = re.compile(r"^\s*```[a-zA-Z]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markup wrapped around a JSON reply."""
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def validate_extraction_payload(value: Any) -> ValidatedPayload:
    """
    Check the decoded reply has the expected structure.

    Returns an AcceptedPayload holding the raw pieces, or a RejectedPayload
    naming the first structural problem found.
    """
    if not isinstance(value, dict):
        return RejectedPayload(reason=f"expected a JSON object, got {type(value).__name__}")

    bills = value.get("bills")
    if not isinstance(bills, list):
        return RejectedPayload(reason="'bills' is missing or is not an array")

    for index, bill in enumerate(bills):
        if not isinstance(bill, dict):
            return RejectedPayload(reason=f"bills[{index}] is not an object")

    patient = value.get("patientDetails")
    if not isinstance(patient, dict):
        return RejectedPayload(reason="'patientDetails' is missing or is not an object")

    policy_holder = value.get("policyHolderDetails")
    if not isinstance(policy_holder, dict):
        return RejectedPayload(reason="'policyHolderDetails' is missing or is not an object")

    return AcceptedPayload(
        bills=bills,
        patient_details=patient,
        policy_holder_details=policy_holder,
    )


def merge_extraction_payload(payload: AcceptedPayload) -> ExtractionResult:
    """Merge an accepted payload onto blank defaults, coercing every declared field."""
    return ExtractionResult(
        bills=[BillDraft.model_validate(bill) for bill in payload.bills],
        patient_details=PatientDetails.model_validate(payload.patient_details),
        policy_holder_details=PolicyHolderDetails.model_validate(payload.policy_holder_details),
    )


def parse_extraction_response(raw: Optional[str]) -> ExtractionResult:
    """
    Convert the remote reply into an ExtractionResult.

    Empty replies and structurally invalid JSON yield the blank default
    (no bills, every identity field ""). Bill order is kept as received.

    Raises:
        MalformedResponseError: If the reply is not JSON at all
    """
    if raw is None or not raw.strip():
        logger.warning("Vision model returned an empty response text")
        return ExtractionResult()

    cleaned = strip_code_fences(raw)

    try:
        decoded = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI response as JSON: {str(e)}")
        logger.debug(f"Response text: {cleaned[:500]}")
        raise MalformedResponseError(f"AI returned invalid JSON: {str(e)}") from e

    validated = validate_extraction_payload(decoded)
    if isinstance(validated, RejectedPayload):
        logger.warning(f"Parsed JSON does not match the expected schema: {validated.reason}")
        return ExtractionResult()

    result = merge_extraction_payload(validated)
    logger.info(f"Normalized extraction: {len(result.bills)} bill(s)")
    return result
