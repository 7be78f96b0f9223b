"""
Configuration management for the deal promoter service.

Settings are loaded from DEAL_PROMOTER_* environment variables (and a
project-root .env file) once at startup. The resulting Settings object is
frozen and passed explicitly to the pipeline and the API.
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / '.env'
if _env_file.exists():
    load_dotenv(_env_file)


class Settings(BaseSettings):
    """Immutable service settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix='DEAL_PROMOTER_', frozen=True)

    # Server
    LISTEN_HOST: str = '0.0.0.0'
    LISTEN_PORT: int = Field(default=8888, ge=1, le=65535)

    # Content source
    IPFS_GATEWAY: str = 'https://ipfs.io'
    FETCH_TIMEOUT_SECONDS: float = Field(default=300, gt=0)

    # Storage provider
    MINER_ID: str
    VERIFIED_DEALS: bool = False
    MAX_PRICE_ATTEMPTS: int = Field(default=5, ge=1, le=50)

    # External tools
    COMMP_BINARY: str = 'boostx'
    DEAL_BINARY: str = 'boost'
    COMMP_TIMEOUT_SECONDS: float = Field(default=600, gt=0)
    DEAL_TIMEOUT_SECONDS: float = Field(default=300, gt=0)

    # Logging
    LOG_LEVEL: str = 'INFO'
    LOG_JSON: bool = False

    def export_url(self, cid: str) -> str:
        """Gateway URL that exports the DAG for a CID as a CAR stream."""
        return f"{self.IPFS_GATEWAY.rstrip('/')}/api/v0/dag/export?arg={cid}"


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
