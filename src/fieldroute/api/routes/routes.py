"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import (
    DepartureRequest,
    DepartureResponse,
    DispatchRequest,
    DispatchResponse,
    OptimizeRouteRequest,
    RouteResultModel,
)
from ...services.routing.service import dispatch_jobs, optimize_single_route, select_departure

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/optimize", response_model=RouteResultModel, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRouteRequest) -> RouteResultModel:
    try:
        return optimize_single_route(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}"
        ) from exc


@router.post("/dispatch", response_model=DispatchResponse, status_code=status.HTTP_200_OK)
def dispatch(payload: DispatchRequest) -> DispatchResponse:
    """Assign jobs across workers and sequence each worker's route."""
    try:
        return dispatch_jobs(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error dispatching jobs: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to dispatch jobs: {str(exc)}"
        ) from exc


@router.post("/departure", response_model=DepartureResponse, status_code=status.HTTP_200_OK)
def departure(payload: DepartureRequest) -> DepartureResponse:
    """Pick the departure time that scores best under traffic-aware travel times."""
    try:
        return select_departure(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error selecting departure time: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to select departure time: {str(exc)}"
        ) from exc
