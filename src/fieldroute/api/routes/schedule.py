"""Scheduling endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.scheduling import (
    BestSlotRequest,
    BestSlotResponse,
    DayOptimizeRequest,
    DayOptimizeResponse,
    EvaluateRequest,
    EvaluationResponse,
    SwapRequest,
    SwapResponse,
)
from ...services.scheduling.service import evaluate_assignment, find_slot, optimize_day, swap_workers

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.post("/evaluate", response_model=EvaluationResponse, status_code=status.HTTP_200_OK)
def evaluate(payload: EvaluateRequest) -> EvaluationResponse:
    try:
        return evaluate_assignment(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error evaluating constraints: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to evaluate constraints: {str(exc)}"
        ) from exc


@router.post("/best-slot", response_model=BestSlotResponse, status_code=status.HTTP_200_OK)
def best_slot(payload: BestSlotRequest) -> BestSlotResponse:
    """Find the highest-scoring worker and start time for a job on a given day."""
    try:
        return find_slot(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error finding time slot: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to find time slot: {str(exc)}"
        ) from exc


@router.post("/swap", response_model=SwapResponse, status_code=status.HTTP_200_OK)
def swap(payload: SwapRequest) -> SwapResponse:
    """Simulate exchanging two workers' jobs for a day."""
    try:
        return swap_workers(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error simulating swap: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to simulate swap: {str(exc)}"
        ) from exc


@router.post("/optimize-day", response_model=DayOptimizeResponse, status_code=status.HTTP_200_OK)
def optimize_worker_day(payload: DayOptimizeRequest) -> DayOptimizeResponse:
    """Re-sequence a worker's committed jobs for a day and propose new times."""
    try:
        return optimize_day(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing day schedule: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize day schedule: {str(exc)}"
        ) from exc
