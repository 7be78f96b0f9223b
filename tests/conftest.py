"""
Pytest configuration and shared fixtures.

Key fixtures:
- settings: frozen Settings for provider f01000 on the public gateway
- sample_cid: payload CID used across pipeline tests
- commp_stdout / deal_stdout: well-formed tool reports

External tools and the gateway are always mocked; no test needs boost,
boostx or network access.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from deal_promoter.clients.process_runner import ProcessOutput  # noqa: E402
from deal_promoter.config import Settings  # noqa: E402

SAMPLE_CID = 'bafyreigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi'
SAMPLE_URL = f'https://ipfs.io/api/v0/dag/export?arg={SAMPLE_CID}'

COMMP_STDOUT = 'CommP CID: baga123\nPiece size: 1024\nCar file size: 2048\n'

DEAL_STDOUT = f"""sent deal proposal
  deal uuid: 9e68fb16-ff8d-4f7e-9d2f-6d0a7e4b6a5c
  storage provider: f01000
  client wallet: f1clientwallet
  payload cid: {SAMPLE_CID}
  url: {SAMPLE_URL}
  commp: baga123
  start epoch: 1000
  end epoch: 519400
  provider collateral: 0.000 FIL
"""

PRICE_REJECTION = (
    'ERROR: deal proposal rejected: failed validation: '
    'storage price per epoch less than asking price: {offered} < {asking}\n'
)


def make_output(returncode: int = 0, stdout: str = '', stderr: str = '') -> ProcessOutput:
    """Build a ProcessOutput as the runner would return it."""
    return ProcessOutput(
        args=('boost',),
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


def rejection(offered: int, asking: int) -> ProcessOutput:
    return make_output(returncode=1, stderr=PRICE_REJECTION.format(offered=offered, asking=asking))


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the caller's environment."""
    return Settings(
        MINER_ID='f01000',
        IPFS_GATEWAY='https://ipfs.io',
        MAX_PRICE_ATTEMPTS=5,
    )


@pytest.fixture
def sample_cid() -> str:
    return SAMPLE_CID


@pytest.fixture
def commp_stdout() -> str:
    return COMMP_STDOUT


@pytest.fixture
def deal_stdout() -> str:
    return DEAL_STDOUT
