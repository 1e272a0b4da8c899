"""Identity record schemas for the patient and the policy holder."""

from typing import Any, Optional
from pydantic import field_validator

from annexure.schemas.base import CamelModel
from annexure.utils.amounts import coerce_text


class _IdentityRecord(CamelModel):
    """Flat record whose declared fields are always present as strings."""

    @field_validator("*", mode="before")
    @classmethod
    def validate_text(cls, v: Any) -> str:
        """Absent or non-string values become strings."""
        return coerce_text(v)


class PatientDetails(_IdentityRecord):
    """Details pertaining to the patient receiving care."""

    name: str = ""
    admission_date: str = ""
    discharge_date: str = ""
    aadhar_number: str = ""
    pan_number: str = ""
    date_of_birth: str = ""
    gender: str = ""


class PolicyHolderDetails(_IdentityRecord):
    """Details pertaining to the policy holder, who may differ from the patient."""

    name: str = ""
    address: str = ""
    pan_number: str = ""
    aadhar_number: str = ""
    phone_number: str = ""
    email: str = ""
    bank_account_number: str = ""
    bank_name: str = ""
    cheque_number: str = ""
    policy_number: str = ""


class PatientDetailsUpdate(CamelModel):
    """Field-wise patch of the patient record."""

    name: Optional[str] = None
    admission_date: Optional[str] = None
    discharge_date: Optional[str] = None
    aadhar_number: Optional[str] = None
    pan_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None


class PolicyHolderDetailsUpdate(CamelModel):
    """Field-wise patch of the policy holder record."""

    name: Optional[str] = None
    address: Optional[str] = None
    pan_number: Optional[str] = None
    aadhar_number: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_name: Optional[str] = None
    cheque_number: Optional[str] = None
    policy_number: Optional[str] = None
