"""Structured logging for generation and claim outcomes."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredWorkflowLogger:
    """Structured logger for workflow operations."""

    def log_generation(
        self,
        template_id: str,
        outcome: str,
        latency_ms: float,
        *,
        user_id: str | None = None,
        doc_id: str | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log a generation attempt with structured data."""
        log_data: dict[str, Any] = {
            "template": template_id,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "authenticated": user_id is not None,
        }
        if user_id:
            log_data["user_id"] = user_id
        if doc_id:
            log_data["doc_id"] = doc_id
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Generation: {template_id} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})

    def log_claim(
        self,
        user_id: str,
        transient_id: str,
        outcome: str,
        *,
        doc_id: str | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log a guest-document claim attempt."""
        log_data: dict[str, Any] = {
            "user_id": user_id,
            "transient_id": transient_id,
            "outcome": outcome,
        }
        if doc_id:
            log_data["doc_id"] = doc_id
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Claim: {transient_id} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
