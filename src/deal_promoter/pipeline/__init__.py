"""Pipeline components: fetch, commp, negotiate, and their orchestrator."""

from .commitment import CommitmentCalculator, parse_commp_report
from .fetcher import ContentFetcher, ScratchFile, build_http_client
from .negotiator import DealNegotiator, parse_asking_price, parse_deal_report
from .pipeline import DealPipeline, PipelineResult
from .schema import LineField, LineSchema

__all__ = [
    'CommitmentCalculator',
    'ContentFetcher',
    'DealNegotiator',
    'DealPipeline',
    'LineField',
    'LineSchema',
    'PipelineResult',
    'ScratchFile',
    'build_http_client',
    'parse_asking_price',
    'parse_commp_report',
    'parse_deal_report',
]
