"""Patient and policy holder detail routes."""

import logging
from fastapi import APIRouter, Depends

from annexure.schemas.details import (
    PatientDetails,
    PatientDetailsUpdate,
    PolicyHolderDetails,
    PolicyHolderDetailsUpdate,
)
from annexure.services.session import SessionContext, get_session

logger = logging.getLogger(__name__)
router = APIRouter(tags=["details"])


@router.get("/patient", response_model=PatientDetails)
async def get_patient_endpoint(session: SessionContext = Depends(get_session)) -> PatientDetails:
    return session.patient


@router.patch("/patient", response_model=PatientDetails)
async def update_patient_endpoint(
    changes: PatientDetailsUpdate,
    session: SessionContext = Depends(get_session),
) -> PatientDetails:
    """Update individual patient fields; omitted fields are left unchanged."""
    logger.info(f"Updating patient fields: {list(changes.model_dump(exclude_none=True))}")
    return session.update_patient(changes)


@router.get("/policy-holder", response_model=PolicyHolderDetails)
async def get_policy_holder_endpoint(session: SessionContext = Depends(get_session)) -> PolicyHolderDetails:
    return session.policy_holder


@router.patch("/policy-holder", response_model=PolicyHolderDetails)
async def update_policy_holder_endpoint(
    changes: PolicyHolderDetailsUpdate,
    session: SessionContext = Depends(get_session),
) -> PolicyHolderDetails:
    """Update individual policy holder fields; omitted fields are left unchanged."""
    logger.info(f"Updating policy holder fields: {list(changes.model_dump(exclude_none=True))}")
    return session.update_policy_holder(changes)
