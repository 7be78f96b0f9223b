"""
Deal negotiation via `boost deal`, with price renegotiation.

The provider rejects proposals priced below its asking price with a
diagnostic ending in `... less than asking price: <offered> < <asking>`.
The negotiator resubmits at the asking price until the provider accepts, a
fatal diagnostic is returned, or the attempt bound is reached.

Expected stdout on acceptance (positions are fixed):
    sent deal proposal
      deal uuid: 9e68fb16-ff8d-4f7e-9d2f-6d0a7e4b6a5c
      storage provider: f01000
      client wallet: f1abc...
      payload cid: bafyk...
      url: https://ipfs.io/api/v0/dag/export?arg=bafyk...
      commp: baga6ea4seaq...
      start epoch: 1000
      end epoch: 519400
      provider collateral: 0.000 FIL
"""

import re

from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
)

from ..clients.process_runner import ProcessOutput, ProcessRunner
from ..errors import DealError, ParseError, PriceRejected, RetriesExhaustedError
from ..logging import get_logger
from ..models.deal import DealRequest, DealResult
from .schema import LineField, LineSchema, informational, signed_int

logger = get_logger(__name__)

PRICE_REJECTION_MARKER = 'storage price per epoch less than asking price'
DEFAULT_MAX_PRICE_ATTEMPTS = 5

_PRICE_FRAGMENT = re.compile(r'(\d+)\s*<\s*(\d+)')

DEAL_REPORT = LineSchema(
    'deal report',
    [
        informational('proposal_sent'),
        LineField('deal_uuid', 'deal uuid'),
        informational('storage_provider'),
        LineField('client_wallet', 'client wallet'),
        informational('payload_cid'),
        informational('url'),
        LineField('commp', 'commp'),
        LineField('start_epoch', 'start epoch', signed_int),
        LineField('end_epoch', 'end epoch', signed_int),
        LineField('provider_collateral', 'provider collateral'),
    ],
)


def parse_asking_price(stderr: str) -> int | None:
    """
    Extract the provider's asking price from a price-rejection diagnostic.

    Returns None when the diagnostic is not a price rejection or its
    trailing `<offered> < <asking>` fragment cannot be read.
    """
    for line in stderr.splitlines():
        if PRICE_REJECTION_MARKER not in line:
            continue
        fragment = line.rsplit(':', 1)[-1].strip()
        match = _PRICE_FRAGMENT.fullmatch(fragment)
        return int(match.group(2)) if match else None
    return None


def parse_deal_report(stdout: str, request: DealRequest) -> DealResult:
    """
    Parse the acceptance report of `boost deal`.

    Provider, payload CID and URL come from the request that was accepted;
    the report lines for them are informational.

    Raises:
        ParseError: On any schema mismatch, or if end epoch <= start epoch
    """
    fields = DEAL_REPORT.parse(stdout)
    try:
        return DealResult(
            deal_uuid=fields['deal_uuid'],
            storage_provider=request.provider,
            client_wallet=fields['client_wallet'],
            payload_cid=request.payload_cid,
            url=request.http_url,
            commp=fields['commp'],
            start_epoch=fields['start_epoch'],
            end_epoch=fields['end_epoch'],
            provider_collateral=fields['provider_collateral'],
        )
    except ValidationError as e:
        raise ParseError(
            f"Resolve end_epoch failure: {e.errors()[0]['msg']}",
            context={
                'schema': DEAL_REPORT.name,
                'start_epoch': fields['start_epoch'],
                'end_epoch': fields['end_epoch'],
            },
            field='end_epoch',
        ) from e


class DealNegotiator:
    """
    Submits a DealRequest and renegotiates the price on rejection.

    Usage:
        negotiator = DealNegotiator(ProcessRunner('boost'), max_attempts=5)
        result = await negotiator.negotiate(request)
    """

    def __init__(
        self,
        runner: ProcessRunner,
        max_attempts: int = DEFAULT_MAX_PRICE_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError('max_attempts must be at least 1')
        self.runner = runner
        self.max_attempts = max_attempts

    async def negotiate(self, request: DealRequest) -> DealResult:
        """
        Negotiate a deal until it is accepted or fails.

        Before each resubmission `request.storage_price_per_epoch` is raised
        in place to the asking price of the last rejection, so it always holds
        the last price actually offered (the accepted one on return).

        Raises:
            DealError: Fatal diagnostic from the tool or unusable rejection
            RetriesExhaustedError: Provider still rejecting after max_attempts
            ProcessError: Tool could not be run or timed out
            ParseError: Acceptance report did not match the schema
        """

        def raise_price(retry_state: RetryCallState) -> None:
            rejection = retry_state.outcome.exception()
            request.storage_price_per_epoch = rejection.asking_price

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(PriceRejected),
            stop=stop_after_attempt(self.max_attempts),
            before_sleep=raise_price,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    output = await self._submit(request)
        except RetryError as e:
            rejection = e.last_attempt.exception()
            raise RetriesExhaustedError(
                f'Provider rejected the price {self.max_attempts} times',
                context={
                    'max_attempts': self.max_attempts,
                    'last_offered_price': request.storage_price_per_epoch,
                    'last_asking_price': getattr(rejection, 'asking_price', None),
                    'diagnostic': str(getattr(rejection, 'message', rejection)),
                },
            ) from rejection

        result = parse_deal_report(output.stdout, request)
        logger.info(
            'negotiate.accepted',
            deal_uuid=result.deal_uuid,
            storage_price_per_epoch=request.storage_price_per_epoch,
            start_epoch=result.start_epoch,
            end_epoch=result.end_epoch,
        )
        return result

    async def _submit(self, request: DealRequest) -> ProcessOutput:
        """Run one submission at the request's current price."""
        offered = request.storage_price_per_epoch
        output = await self.runner.run(*request.to_command_args())
        if output.success:
            return output

        diagnostic = output.stderr
        if PRICE_REJECTION_MARKER not in diagnostic:
            logger.warning('negotiate.failed', returncode=output.returncode)
            raise DealError(diagnostic)

        asking = parse_asking_price(diagnostic)
        if asking is None:
            raise DealError(diagnostic)
        if asking <= offered:
            raise DealError(
                f'Provider asking price {asking} is not above offered price {offered}',
                context={'diagnostic': diagnostic.strip()},
            )

        logger.info('negotiate.price_rejected', offered_price=offered, asking_price=asking)
        raise PriceRejected(diagnostic.strip(), asking_price=asking, offered_price=offered)
