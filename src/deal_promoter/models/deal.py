"""
Deal models for the promotion pipeline.

- CommitmentResult: parsed output of the piece-commitment tool (immutable)
- DealRequest: arguments for one deal submission; the price is the only
  field the negotiator changes between attempts
- DealResult: parsed success report of the deal tool, returned to the client
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CommitmentResult(BaseModel):
    """Piece commitment computed over a CAR file."""

    model_config = ConfigDict(frozen=True)

    commp_cid: str = Field(..., min_length=1, description='Piece commitment CID')
    piece_size: int = Field(..., gt=0, description='Padded piece size in bytes')
    car_file_size: int = Field(..., gt=0, description='CAR file size in bytes')


class DealRequest(BaseModel):
    """
    Arguments for a `deal` submission to a storage provider.

    Owned by a single pipeline invocation. `storage_price_per_epoch` is
    validated on assignment so a retry can never set a negative price.
    """

    model_config = ConfigDict(validate_assignment=True)

    provider: str = Field(..., min_length=1, description='Storage provider (miner) ID')
    http_url: str = Field(..., description='URL the provider downloads the CAR from')
    commp: str = Field(..., min_length=1, description='Piece commitment CID')
    car_size: int = Field(..., gt=0)
    piece_size: int = Field(..., gt=0)
    payload_cid: str = Field(..., min_length=1, description='Root CID of the content')
    storage_price_per_epoch: int = Field(default=0, ge=0)
    verified: bool = False

    @classmethod
    def from_commitment(
        cls,
        commitment: CommitmentResult,
        provider: str,
        http_url: str,
        payload_cid: str,
        verified: bool = False,
    ) -> 'DealRequest':
        """Build the initial request for a computed commitment at price zero."""
        return cls(
            provider=provider,
            http_url=http_url,
            commp=commitment.commp_cid,
            car_size=commitment.car_file_size,
            piece_size=commitment.piece_size,
            payload_cid=payload_cid,
            storage_price_per_epoch=0,
            verified=verified,
        )

    def to_command_args(self) -> list[str]:
        """Render the `deal` subcommand and its named arguments."""
        return [
            'deal',
            '--provider', self.provider,
            '--http-url', self.http_url,
            '--commp', self.commp,
            '--car-size', str(self.car_size),
            '--piece-size', str(self.piece_size),
            '--payload-cid', self.payload_cid,
            '--storage-price-per-epoch', str(self.storage_price_per_epoch),
            f"--verified={'true' if self.verified else 'false'}",
        ]


class DealResult(BaseModel):
    """Accepted deal proposal, serialized as the HTTP success body."""

    model_config = ConfigDict(frozen=True)

    deal_uuid: str
    storage_provider: str
    client_wallet: str
    payload_cid: str
    url: str
    commp: str
    start_epoch: int
    end_epoch: int
    provider_collateral: str

    @model_validator(mode='after')
    def _check_epochs(self) -> 'DealResult':
        if self.end_epoch <= self.start_epoch:
            raise ValueError(
                f'end_epoch ({self.end_epoch}) must be after start_epoch ({self.start_epoch})'
            )
        return self
