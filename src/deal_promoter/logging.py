"""
structlog setup for the deal promoter service.

Request-scoped keys (request_id, cid) are bound with structlog's contextvars
support, so concurrent requests each log their own values.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Generator

import structlog
from structlog.types import Processor


def configure_logging(
    json_output: bool = False,
    log_level: str = 'INFO',
) -> None:
    """
    Configure structlog and the stdlib root logger (uvicorn, httpx).

    Args:
        json_output: JSON lines when True, colored console output otherwise
        log_level: Minimum level name, e.g. 'INFO' or 'DEBUG'
    """
    level_num = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format='%(message)s',
        stream=sys.stdout,
        level=level_num,
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def logging_context(**values: Any) -> Generator[None, None, None]:
    """
    Bind keys to every log event emitted inside the block.

    None values are skipped; previous bindings are restored on exit.

    Usage:
        with logging_context(request_id="abc123", cid="bafy..."):
            logger.info("fetch.complete")  # carries request_id and cid
    """
    bound = {key: value for key, value in values.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


class PipelineTimer:
    """
    Per-stage wall-clock durations in milliseconds.

    Usage:
        timer = PipelineTimer()
        with timer.stage("fetch"):
            ...
        logger.info("pipeline.complete", **timer.summary())
    """

    def __init__(self):
        self.stages: dict[str, float] = {}
        self.start_time: float = time.perf_counter()

    @contextmanager
    def stage(self, name: str) -> Generator[None, None, None]:
        """Time a pipeline stage, recording it even if the stage raises."""
        stage_start = time.perf_counter()
        try:
            yield
        finally:
            self.stages[name] = (time.perf_counter() - stage_start) * 1000

    @property
    def total_ms(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        return {
            'total_ms': round(self.total_ms, 2),
            'stages': {k: round(v, 2) for k, v in self.stages.items()},
        }


# Development mode by default; the CLI reconfigures from Settings at startup
configure_logging(json_output=False)
