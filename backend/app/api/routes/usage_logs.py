"""Usage-log endpoint - append-only, debits the caller's credits."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_metrics, get_usage_log_store
from backend.app.db.context import RequestContext
from backend.app.db.repositories import StorageError, UsageLogStore
from backend.app.models.documents import UsageLogEntry
from backend.app.utils.metrics import WorkflowMetrics

router = APIRouter(prefix="/usage-logs", tags=["usage"])


class CreateUsageLogRequest(BaseModel):
    """Request body for POST /usage-logs."""

    action: str = Field(..., min_length=1, max_length=64)
    credits_used: int = Field(..., ge=0)
    doc_id: str | None = None


@router.post("", response_model=UsageLogEntry, status_code=status.HTTP_201_CREATED)
async def append_usage_log(
    body: CreateUsageLogRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    usage_logs: Annotated[UsageLogStore, Depends(get_usage_log_store)],
    metrics: Annotated[WorkflowMetrics, Depends(get_metrics)],
) -> UsageLogEntry:
    """Record usage; `credits_used` is taken from the balance, floored at zero."""
    try:
        entry = await usage_logs.append(
            str(ctx.user_id),
            action=body.action,
            credits_used=body.credits_used,
            doc_id=body.doc_id,
        )
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if body.credits_used > 0:
        metrics.inc_credits_debited("usage_log", body.credits_used)
    return entry
