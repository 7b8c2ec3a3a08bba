from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.crud.application import list_applications_awaiting
from loanflow.database import get_db
from loanflow.schemas.application import AwaitingApplicationItem, AwaitingApplicationListResponse
from loanflow.services.workflow_stages import INITIAL_STAGE, STAGE_ORDER, Stage

router = APIRouter(prefix="/queue", tags=["queue"])

# field_officer is approved on submission, so it never has a queue.
_REVIEW_STAGES = {s.value for s in STAGE_ORDER[STAGE_ORDER.index(INITIAL_STAGE):]}


@router.get("", response_model=AwaitingApplicationListResponse)
async def list_queue_endpoint(
    stage: str = Query(..., description="manager | director | chairperson | ceo"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db),
) -> AwaitingApplicationListResponse:
    if stage not in _REVIEW_STAGES:
        raise HTTPException(status_code=422, detail="Invalid stage")

    items = await list_applications_awaiting(
        session=session,
        stage=Stage(stage),
        limit=limit,
        offset=offset,
    )

    return AwaitingApplicationListResponse(
        stage=stage,
        items=[AwaitingApplicationItem.model_validate(i) for i in items],
    )
