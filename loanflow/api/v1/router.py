from fastapi import APIRouter

from loanflow.api.v1.endpoints.applications import router as applications_router
from loanflow.api.v1.endpoints.approvals import router as approvals_router
from loanflow.api.v1.endpoints.queue import router as queue_router

router = APIRouter()


@router.get("/ping")
async def ping():
    return {"ping": "pong"}


router.include_router(applications_router)
router.include_router(approvals_router)
router.include_router(queue_router)
