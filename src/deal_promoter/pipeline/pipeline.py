"""
Main pipeline orchestrator for promoting a CID to a storage deal.

Provides end-to-end processing:
1. Stream the CAR export of the CID from the gateway into a scratch file
2. Compute the piece commitment over the scratch file
3. Build a DealRequest at price zero and negotiate it with the provider
4. Return a PipelineResult carrying the accepted deal or the failure cause
"""

from __future__ import annotations

from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

import httpx

from ..clients.process_runner import ProcessRunner
from ..config import Settings
from ..errors import DealPromoterError, PipelineError
from ..logging import PipelineTimer, get_logger, logging_context
from ..models.deal import DealRequest, DealResult
from .commitment import CommitmentCalculator
from .fetcher import ContentFetcher
from .negotiator import DealNegotiator

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Outcome of promoting one CID: either a deal or a failure cause."""

    cid: str
    request_id: str

    deal: DealResult | None = None
    storage_price_per_epoch: int | None = None

    # Failure (first fatal error, human readable)
    error: str | None = None
    error_type: str | None = None

    # Timing
    processing_time_ms: int | None = None
    stage_timings: dict[str, float] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.deal is not None and self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'cid': self.cid,
            'request_id': self.request_id,
            'success': self.success,
            'deal': self.deal.model_dump() if self.deal else None,
            'storage_price_per_epoch': self.storage_price_per_epoch,
            'error': self.error,
            'error_type': self.error_type,
            'processing_time_ms': self.processing_time_ms,
            'stage_timings': self.stage_timings,
        }


class DealPipeline:
    """
    End-to-end pipeline turning a CID into a storage deal.

    Orchestrates:
    - ContentFetcher: stream the CAR export to scratch storage
    - CommitmentCalculator: run `boostx commp` over it
    - DealNegotiator: run `boost deal`, renegotiating the price

    Holds no per-request state, so one instance serves concurrent requests.

    Usage:
        pipeline = DealPipeline.from_settings(settings, http_client)
        result = await pipeline.process_cid('bafy...')
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: ContentFetcher,
        calculator: CommitmentCalculator,
        negotiator: DealNegotiator,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.calculator = calculator
        self.negotiator = negotiator

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> DealPipeline:
        """Wire the pipeline components from immutable settings."""
        return cls(
            settings=settings,
            fetcher=ContentFetcher(http_client),
            calculator=CommitmentCalculator(
                ProcessRunner(settings.COMMP_BINARY, timeout=settings.COMMP_TIMEOUT_SECONDS)
            ),
            negotiator=DealNegotiator(
                ProcessRunner(settings.DEAL_BINARY, timeout=settings.DEAL_TIMEOUT_SECONDS),
                max_attempts=settings.MAX_PRICE_ATTEMPTS,
            ),
        )

    async def process_cid(self, cid: str, request_id: str | None = None) -> PipelineResult:
        """
        Promote `cid` to a storage deal.

        Never raises for pipeline failures; they are returned on the result.
        Cancellation propagates to the caller.
        """
        request_id = request_id or uuid4().hex
        timer = PipelineTimer()
        result = PipelineResult(cid=cid, request_id=request_id)

        with logging_context(request_id=request_id, cid=cid):
            logger.info('pipeline.started', provider=self.settings.MINER_ID)
            request: DealRequest | None = None
            try:
                request = await self._prepare(cid, timer)
                with timer.stage('negotiate'):
                    result.deal = await self.negotiator.negotiate(request)
            except DealPromoterError as e:
                result.error = str(e)
                result.error_type = type(e).__name__
            except Exception as e:
                error = PipelineError(
                    f'Pipeline failed: {e}',
                    context={'error_type': type(e).__name__},
                )
                result.error = str(error)
                result.error_type = type(error).__name__

            if request is not None:
                result.storage_price_per_epoch = request.storage_price_per_epoch
            result.processing_time_ms = int(timer.total_ms)
            result.stage_timings = timer.stages.copy()

            if result.success:
                logger.info(
                    'pipeline.complete',
                    deal_uuid=result.deal.deal_uuid,
                    storage_price_per_epoch=result.storage_price_per_epoch,
                    **timer.summary(),
                )
            else:
                logger.error(
                    'pipeline.failed',
                    error=result.error,
                    error_type=result.error_type,
                    **timer.summary(),
                )
            return result

    async def _prepare(self, cid: str, timer: PipelineTimer) -> DealRequest:
        """Fetch and commp the content; the scratch file is gone on return."""
        url = self.settings.export_url(cid)

        async with AsyncExitStack() as scratch_scope:
            with timer.stage('fetch'):
                scratch = await scratch_scope.enter_async_context(self.fetcher.fetch(url))
            with timer.stage('commp'):
                commitment = await self.calculator.compute(scratch.path)

        return DealRequest.from_commitment(
            commitment,
            provider=self.settings.MINER_ID,
            http_url=url,
            payload_cid=cid,
            verified=self.settings.VERIFIED_DEALS,
        )
