"""FastAPI dependency providers for stores, services and collaborators."""

from functools import lru_cache
from typing import Annotated

import redis
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.accounts.service import AccountService
from backend.app.config import get_settings
from backend.app.db.engine import get_session
from backend.app.db.inmemory import InMemoryRateLimiter
from backend.app.db.repositories import RateLimiter
from backend.app.db.sql_repositories import (
    SqlAccountStore,
    SqlDocumentStore,
    SqlProfileStore,
    SqlUsageLogStore,
)
from backend.app.llm.client import DocumentGenerator, get_llm_client
from backend.app.middleware.ratelimit import RateLimitMiddleware, create_default_bucket_map
from backend.app.ratelimit import RedisRateLimiter
from backend.app.utils.metrics import PrometheusWorkflowMetrics, WorkflowMetrics

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_document_store(session: SessionDep) -> SqlDocumentStore:
    return SqlDocumentStore(session)


def get_profile_store(session: SessionDep) -> SqlProfileStore:
    return SqlProfileStore(session)


def get_usage_log_store(session: SessionDep) -> SqlUsageLogStore:
    return SqlUsageLogStore(session)


def get_account_store(session: SessionDep) -> SqlAccountStore:
    return SqlAccountStore(session)


def get_account_service(
    accounts: Annotated[SqlAccountStore, Depends(get_account_store)],
    profiles: Annotated[SqlProfileStore, Depends(get_profile_store)],
) -> AccountService:
    settings = get_settings()
    return AccountService(
        accounts,
        profiles,
        signup_credits=settings.signup_credits,
        token_ttl_hours=settings.auth_token_ttl_hours,
    )


@lru_cache
def get_generator() -> DocumentGenerator:
    """Process-wide generation collaborator (OpenAI or the stub)."""
    return get_llm_client()


@lru_cache
def get_metrics() -> WorkflowMetrics:
    return PrometheusWorkflowMetrics()


def _make_limiter() -> RateLimiter:
    settings = get_settings()
    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        return RedisRateLimiter(client, max_requests=settings.generations_per_min)
    return InMemoryRateLimiter(max_requests=settings.generations_per_min)


@lru_cache
def get_rate_limit() -> RateLimitMiddleware:
    """Process-wide rate limiter, Redis-backed when REDIS_URL is set."""
    return RateLimitMiddleware(_make_limiter(), create_default_bucket_map())
