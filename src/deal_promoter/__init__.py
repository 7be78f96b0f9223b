"""
Deal Promoter

Promotes IPFS content to Filecoin storage deals: streams the CAR export of a
CID from a gateway, computes its piece commitment with `boostx`, and
negotiates a deal with a storage provider through `boost`, raising the
offered price when the provider asks for more.
"""

__version__ = '0.1.0'

# Re-export key classes for convenience
from .config import Settings, get_settings
from .errors import (
    DealError,
    DealPromoterError,
    FetchError,
    ParseError,
    PipelineError,
    PriceRejected,
    ProcessError,
    ProcessTimeoutError,
    RetriesExhaustedError,
)
from .logging import (
    PipelineTimer,
    configure_logging,
    get_logger,
    logging_context,
)
from .models import CommitmentResult, DealRequest, DealResult
from .pipeline import (
    CommitmentCalculator,
    ContentFetcher,
    DealNegotiator,
    DealPipeline,
    PipelineResult,
)

__all__ = [
    # Version
    '__version__',
    # Config
    'Settings',
    'get_settings',
    # Main Pipeline
    'DealPipeline',
    'PipelineResult',
    # Components
    'ContentFetcher',
    'CommitmentCalculator',
    'DealNegotiator',
    # Models
    'CommitmentResult',
    'DealRequest',
    'DealResult',
    # Logging
    'configure_logging',
    'get_logger',
    'logging_context',
    'PipelineTimer',
    # Errors
    'DealPromoterError',
    'FetchError',
    'ProcessError',
    'ProcessTimeoutError',
    'ParseError',
    'PriceRejected',
    'DealError',
    'RetriesExhaustedError',
    'PipelineError',
]
