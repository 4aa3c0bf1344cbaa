"""Capture lifecycle API endpoints.

Routes:
- POST /captures/{capture_id}/reprocess - Restart the processing pipeline
- DELETE /captures/{capture_id} - Delete a capture and schedule vector cleanup

Dependencies: linkmeld.application.ingestion_orchestrator
System role: Re-process and delete HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from linkmeld.api.deps import get_api_key, get_current_user, get_orchestrator
from linkmeld.application.ingestion_orchestrator import IngestionOrchestrator
from linkmeld.core.exceptions import CaptureNotFoundError
from linkmeld.models.conversation import UserContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/captures", tags=["captures"])


class ReprocessResponse(BaseModel):
    """Re-process acknowledgement."""

    capture_id: str
    status: str
    queued_job: str


@router.post("/{capture_id}/reprocess", response_model=ReprocessResponse, status_code=202)
async def reprocess_capture(
    capture_id: str,
    user: UserContext = Depends(get_current_user),
    api_key: str | None = Depends(get_api_key),
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> ReprocessResponse:
    """Queue the capture for processing again.

    Raises:
        HTTPException(404): Capture not found
    """
    try:
        queued = await orchestrator.reprocess(capture_id, user.id, api_key=api_key)
    except CaptureNotFoundError as e:
        raise HTTPException(
            status_code=404,
            detail={"code": "CAPTURE_NOT_FOUND", "message": e.message},
        )
    return ReprocessResponse(capture_id=capture_id, status="processing", queued_job=queued)


@router.delete("/{capture_id}", status_code=204)
async def delete_capture(
    capture_id: str,
    user: UserContext = Depends(get_current_user),
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Delete a capture; vector cleanup runs in the background.

    Raises:
        HTTPException(404): Capture not found
    """
    deleted = await orchestrator.delete_capture(capture_id, user.id)
    if not deleted:
        raise HTTPException(
            status_code=404,
            detail={"code": "CAPTURE_NOT_FOUND", "message": f"Capture not found: {capture_id}"},
        )
    return Response(status_code=204)
