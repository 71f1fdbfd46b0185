"""Generation endpoint - POST /generate (guests and signed-in users)."""

import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from backend.app.api.auth import get_optional_context
from backend.app.api.deps import get_generator, get_metrics, get_rate_limit
from backend.app.catalog import template_for_type
from backend.app.db.context import RequestContext
from backend.app.llm.client import DocumentGenerator, GenerationError, GenerationRateLimited
from backend.app.middleware.ratelimit import RateLimitMiddleware
from backend.app.models.common import DocType
from backend.app.utils.metrics import WorkflowMetrics

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generate"])


class GenerateRequest(BaseModel):
    """Request body for POST /generate."""

    document_type: DocType
    field_values: dict[str, str] = Field(default_factory=dict)


class GenerateResponse(BaseModel):
    """Response for POST /generate."""

    text: str


@router.post("/generate", response_model=GenerateResponse)
async def generate(
    body: GenerateRequest,
    request: Request,
    ctx: Annotated[RequestContext | None, Depends(get_optional_context)],
    generator: Annotated[DocumentGenerator, Depends(get_generator)],
    limiter: Annotated[RateLimitMiddleware, Depends(get_rate_limit)],
    metrics: Annotated[WorkflowMetrics, Depends(get_metrics)],
) -> GenerateResponse:
    """Draft a document.

    Raises:
        HTTPException: 429 when rate limited (here or upstream), 502 when
            the model fails or returns nothing
    """
    client_host = request.client.host if request.client else None
    allowed, retry_after = limiter.check_rate_limit(request.url.path, ctx, client_host)
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please try again later.",
            headers={"Retry-After": str(retry_after)},
        )

    config = template_for_type(body.document_type)
    template = config.id if config else body.document_type.name.lower()

    start = time.monotonic()
    try:
        text = await generator.generate(body.document_type, body.field_values)
    except GenerationRateLimited as e:
        metrics.record_generation(template, "failed", (time.monotonic() - start) * 1000)
        metrics.inc_generation_error("rate_limited")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=e.message,
            headers={"Retry-After": "60"},
        ) from e
    except GenerationError as e:
        metrics.record_generation(template, "failed", (time.monotonic() - start) * 1000)
        metrics.inc_generation_error("generation_error")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message) from e

    metrics.record_generation(template, "success", (time.monotonic() - start) * 1000)
    logger.info(f"Generated {body.document_type.value} for {'user' if ctx else 'guest'}")
    return GenerateResponse(text=text)
