"""Tests for service configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from deal_promoter.config import Settings


class TestSettings:
    def test_loads_from_env(self):
        env = {
            "DEAL_PROMOTER_MINER_ID": "f09999",
            "DEAL_PROMOTER_IPFS_GATEWAY": "http://localhost:8080",
            "DEAL_PROMOTER_MAX_PRICE_ATTEMPTS": "9",
            "DEAL_PROMOTER_VERIFIED_DEALS": "true",
        }
        with patch.dict(os.environ, env, clear=False):
            settings = Settings()

        assert settings.MINER_ID == "f09999"
        assert settings.IPFS_GATEWAY == "http://localhost:8080"
        assert settings.MAX_PRICE_ATTEMPTS == 9
        assert settings.VERIFIED_DEALS is True

    def test_defaults(self):
        with patch.dict(os.environ, {"DEAL_PROMOTER_MINER_ID": "f01000"}, clear=True):
            settings = Settings()

        assert settings.LISTEN_HOST == "0.0.0.0"
        assert settings.LISTEN_PORT == 8888
        assert settings.IPFS_GATEWAY == "https://ipfs.io"
        assert settings.COMMP_BINARY == "boostx"
        assert settings.DEAL_BINARY == "boost"
        assert settings.MAX_PRICE_ATTEMPTS == 5
        assert settings.VERIFIED_DEALS is False

    def test_miner_id_required(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError):
                Settings()

    def test_frozen(self, settings):
        with pytest.raises(ValidationError):
            settings.MINER_ID = "f02000"

    def test_attempt_bound_validated(self):
        with pytest.raises(ValidationError):
            Settings(MINER_ID="f01000", MAX_PRICE_ATTEMPTS=0)

    def test_export_url(self):
        settings = Settings(MINER_ID="f01000", IPFS_GATEWAY="https://gw.example/")

        assert settings.export_url("bafyroot") == (
            "https://gw.example/api/v0/dag/export?arg=bafyroot"
        )
