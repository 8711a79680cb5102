"""
Run endpoints.

Trigger a guest submission run and read cumulative statistics.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import get_orchestrator
from core.domain.exceptions import RunInProgressError
from orchestration import Orchestrator


router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    summary="Run guest submission once",
    description="""
    Process every pending guest record once and return the run report.

    Only one run can be active at a time; a request made while a run is in
    progress is rejected with 409.
    """,
)
async def trigger_run(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    try:
        report = await orchestrator.run_once()
    except RunInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return report.to_dict()


@router.get(
    "/stats",
    status_code=status.HTTP_200_OK,
    summary="Processing statistics",
)
async def get_stats(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Cumulative counters since the API process started."""
    return orchestrator.stats()
