from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.crud.application import create_application, get_application
from loanflow.crud.user import user_crud
from loanflow.database import get_db
from loanflow.schemas.application import LoanApplicationCreate, LoanApplicationRead


router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("", response_model=LoanApplicationRead, status_code=status.HTTP_201_CREATED)
async def create_application_endpoint(
    payload: LoanApplicationCreate,
    session: AsyncSession = Depends(get_db),
) -> LoanApplicationRead:
    if payload.created_by is not None and await user_crud.get(session, id=payload.created_by) is None:
        raise HTTPException(status_code=422, detail="created_by does not reference a known user")

    app = await create_application(session=session, obj_in=payload)
    return LoanApplicationRead.model_validate(app)


@router.get("/{application_id}", response_model=LoanApplicationRead)
async def get_application_endpoint(
    application_id: str,
    session: AsyncSession = Depends(get_db),
) -> LoanApplicationRead:
    try:
        # Keep it explicit to get a clean 404 for malformed UUIDs.
        app_id = UUID(application_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Application not found")

    app = await get_application(session=session, application_id=app_id)
    if app is None:
        raise HTTPException(status_code=404, detail="Application not found")

    return LoanApplicationRead.model_validate(app)
