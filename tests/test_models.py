"""
Tests for commitment and deal models.
"""

import pytest
from pydantic import ValidationError

from deal_promoter.models.deal import CommitmentResult, DealRequest, DealResult


def _request(**overrides) -> DealRequest:
    fields = dict(
        provider='f01000',
        http_url='https://ipfs.io/api/v0/dag/export?arg=bafyroot',
        commp='baga123',
        car_size=2048,
        piece_size=1024,
        payload_cid='bafyroot',
    )
    fields.update(overrides)
    return DealRequest(**fields)


class TestCommitmentResult:
    def test_sizes_must_be_positive(self):
        with pytest.raises(ValidationError):
            CommitmentResult(commp_cid='baga', piece_size=0, car_file_size=1)

    def test_immutable(self):
        result = CommitmentResult(commp_cid='baga', piece_size=1, car_file_size=1)

        with pytest.raises(ValidationError):
            result.piece_size = 2


class TestDealRequest:
    def test_defaults(self):
        request = _request()

        assert request.storage_price_per_epoch == 0
        assert request.verified is False

    def test_from_commitment(self):
        commitment = CommitmentResult(commp_cid='baga123', piece_size=1024, car_file_size=2048)

        request = DealRequest.from_commitment(
            commitment,
            provider='f01000',
            http_url='https://ipfs.io/x',
            payload_cid='bafyroot',
        )

        assert request.commp == 'baga123'
        assert request.piece_size == 1024
        assert request.car_size == 2048
        assert request.storage_price_per_epoch == 0

    def test_price_validated_on_assignment(self):
        request = _request()

        with pytest.raises(ValidationError):
            request.storage_price_per_epoch = -1

        request.storage_price_per_epoch = 100
        assert request.storage_price_per_epoch == 100


class TestDealResult:
    def test_epoch_order_enforced(self):
        with pytest.raises(ValidationError):
            DealResult(
                deal_uuid='d',
                storage_provider='f01000',
                client_wallet='f1',
                payload_cid='bafy',
                url='u',
                commp='baga',
                start_epoch=10,
                end_epoch=10,
                provider_collateral='0 FIL',
            )
