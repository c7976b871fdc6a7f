"""Export gate - POST /export-trip."""

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from tripgen.api.auth import require_account
from tripgen.api.dependencies import get_account_repository
from tripgen.config import Settings, get_settings
from tripgen.db.repositories import AccountRepository
from tripgen.errors import EntitlementError
from tripgen.llm.tiers import profile_for
from tripgen.services.entitlements import Entitlement, authorize_export

router = APIRouter(tags=["export"])
logger = logging.getLogger(__name__)


class ExportResponse(BaseModel):
    """Response for POST /export-trip."""

    success: bool
    message: str


@router.post("/export-trip", response_model=ExportResponse)
async def export_trip(
    account_id: Annotated[uuid.UUID, Depends(require_account)],
    accounts: Annotated[AccountRepository, Depends(get_account_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ExportResponse:
    """Authorize a client-side export; members are free, others pay one credit.

    Raises:
        HTTPException: 401 anonymous, 404 no account, 402 no credits
    """
    account = await accounts.get_account(account_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    entitlement = Entitlement.from_account(account)
    try:
        decision = await authorize_export(
            entitlement, profile_for(entitlement.tier, settings), accounts
        )
    except EntitlementError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e

    logger.info(f"Export authorized for {account_id}: {decision.message}")
    return ExportResponse(success=True, message=decision.message)
