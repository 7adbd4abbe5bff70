"""Unit tests for settings validation and logging setup."""

import pytest
from loguru import logger
from pydantic import ValidationError

from mlm_core.config.settings import Settings
from mlm_core.utils.logging import setup_logging


class TestSettings:
    """Settings validators."""

    def test_defaults(self):
        config = Settings(_env_file=None, database_url="sqlite+aiosqlite:///:memory:")

        assert config.is_sqlite
        assert config.min_withdrawal_amount is None
        assert 1 <= config.optimistic_lock_max_retries <= 20

    def test_rejects_sync_driver(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, database_url="postgresql://db/mlm")

    def test_normalizes_log_level(self):
        config = Settings(_env_file=None, log_level="debug")

        assert config.log_level == "DEBUG"

    def test_rejects_unknown_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="verbose")

    def test_rejects_sqlite_in_production(self):
        with pytest.raises(ValidationError):
            Settings(
                _env_file=None,
                environment="production",
                database_url="sqlite+aiosqlite:///./mlm.db",
            )

    def test_retry_bounds(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, optimistic_lock_max_retries=0)


class TestSetupLogging:
    """Loguru sink configuration."""

    def test_writes_to_log_file(self, tmp_path):
        log_file = tmp_path / "mlm.log"
        config = Settings(_env_file=None, log_level="INFO", log_file=str(log_file))

        setup_logging(config)
        logger.info("Ledger ready")
        logger.remove()

        content = log_file.read_text(encoding="utf-8")
        assert "Logging configured" in content
        assert "Ledger ready" in content
