"""
Structured logging configuration.
Pipeline stages log counts and timings, never raw GPS data.
"""
import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, List, Optional

import structlog
from structlog.types import Processor

from sectionstats.core.config import settings


def setup_logging() -> None:
    """Configure structured logging for the application."""

    # Common processors
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT == "json":
        # JSON format for production
        renderer = structlog.processors.JSONRenderer()
    else:
        # Console format for development
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure root logger
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


# ========================================
# Pipeline Timing
# ========================================

@dataclass
class StageTiming:
    """Duration of a single pipeline stage."""
    stage: str
    duration_ms: float
    item_count: Optional[int] = None


@dataclass
class PipelineTimings:
    """Timings collected over one calculator run."""
    stages: List[StageTiming] = field(default_factory=list)

    @property
    def total_ms(self) -> float:
        return sum(s.duration_ms for s in self.stages)

    def to_dict(self) -> Dict[str, float]:
        """Stage name -> rounded duration, for log lines."""
        return {s.stage: round(s.duration_ms, 2) for s in self.stages}


class PipelineTimer:
    """
    Times the stages of a section performance computation.

    Usage:
        timer = PipelineTimer(logger)
        with timer.stage("bucket") as stage:
            buckets = bucket_candidates(...)
            stage.item_count = len(buckets)
        logger.info("Done", **timer.timings.to_dict())

    Timings are always collected; per-stage debug lines are emitted only
    when PIPELINE_TIMING_LOG is enabled.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        enabled: Optional[bool] = None
    ):
        self.logger = logger
        self.enabled = settings.PIPELINE_TIMING_LOG if enabled is None else enabled
        self.timings = PipelineTimings()

    @contextmanager
    def stage(self, name: str, **context: Any) -> Generator[StageTiming, None, None]:
        """Context manager measuring one named stage."""
        timing = StageTiming(stage=name, duration_ms=0.0)
        start = time.perf_counter()
        try:
            yield timing
        finally:
            timing.duration_ms = (time.perf_counter() - start) * 1000
            self.timings.stages.append(timing)

            if self.enabled:
                self.logger.debug(
                    "Pipeline stage finished",
                    stage=name,
                    duration_ms=round(timing.duration_ms, 2),
                    item_count=timing.item_count,
                    **context
                )
