"""Pydantic models for commitments, deal requests and deal results."""

from .deal import CommitmentResult, DealRequest, DealResult

__all__ = [
    'CommitmentResult',
    'DealRequest',
    'DealResult',
]
