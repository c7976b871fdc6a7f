"""Logging setup and structured stage logging for the generation pipeline."""

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at application start."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


@dataclass(frozen=True)
class StageContext:
    """Identifies the request a stage belongs to."""

    request_id: str
    account_id: str | None
    action: str  # generate / update / export


class StructuredStageLogger:
    """Structured logger for pipeline stages."""

    def log_stage(
        self,
        ctx: StageContext,
        stage: str,
        outcome: str,
        latency_ms: float | None = None,
        error_reason: str | None = None,
        **fields: Any,
    ) -> None:
        """Log one pipeline stage with structured data."""
        log_data: dict[str, Any] = {
            "request_id": ctx.request_id,
            "account_id": ctx.account_id,
            "action": ctx.action,
            "stage": stage,
            "outcome": outcome,
        }
        if latency_ms is not None:
            log_data["latency_ms"] = round(latency_ms, 2)
        if error_reason:
            log_data["error_reason"] = error_reason
        log_data.update(fields)

        log_msg = f"Pipeline stage: {ctx.action}.{stage} - {outcome}"

        if outcome in ("success", "skipped"):
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
