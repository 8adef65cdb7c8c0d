"""Schedule change impact endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.impact import CancellationRequest, CancellationResponse, RescheduleRequest, RescheduleResponse
from ...services.impact.service import cancellation_impact, reschedule_impact

router = APIRouter(prefix="/impact", tags=["impact"])


@router.post("/cancellation", response_model=CancellationResponse, status_code=status.HTTP_200_OK)
def cancellation(payload: CancellationRequest) -> CancellationResponse:
    try:
        return cancellation_impact(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error analyzing cancellation impact: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to analyze cancellation impact: {str(exc)}"
        ) from exc


@router.post("/reschedule", response_model=RescheduleResponse, status_code=status.HTTP_200_OK)
def reschedule(payload: RescheduleRequest) -> RescheduleResponse:
    try:
        return reschedule_impact(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error analyzing reschedule impact: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to analyze reschedule impact: {str(exc)}"
        ) from exc
