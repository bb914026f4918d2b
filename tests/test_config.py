"""
Tests for configuration loading and logging setup.
"""

import logging

import pytest

from config import CONFIG_ENV_VAR, ConfigurationManager, get_config
from invoice_voucher.utils.logger import ColoredFormatter, get_logger, setup_logger


class TestConfigurationManager:
    """Tests for the YAML configuration singleton."""

    def test_dot_notation(self):
        assert get_config("voucher.tax_ledgers.sgst") == "SGST"
        assert get_config("voucher.missing", "fallback") == "fallback"

    def test_singleton(self):
        assert ConfigurationManager() is ConfigurationManager()

    def test_environment_override(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("voucher:\n  default_company: Branch Office\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        ConfigurationManager.reset()

        assert get_config("voucher.default_company") == "Branch Office"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        ConfigurationManager.reset()

        assert ConfigurationManager(str(path)).get_all() == {}

    def test_missing_file(self, tmp_path):
        ConfigurationManager.reset()
        with pytest.raises(FileNotFoundError):
            ConfigurationManager(str(tmp_path / "missing.yaml"))


class TestLogger:
    """Tests for logger setup."""

    @pytest.fixture(autouse=True)
    def clean_handlers(self):
        yield
        logging.getLogger("invoice_voucher").handlers.clear()

    def test_child_loggers(self):
        assert get_logger("invoice_voucher.voucher.builder").name == "invoice_voucher.voucher.builder"
        assert get_logger("tests").name == "invoice_voucher.tests"

    def test_setup_logger(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        logger = setup_logger(level="DEBUG", log_file=str(log_file), colorize=False)
        get_logger("invoice_voucher.pipeline").info("hello")

        assert logger.level == logging.DEBUG
        assert "hello" in log_file.read_text(encoding="utf-8")

    def test_quiet_console(self):
        logger = setup_logger(level="INFO", quiet=True)
        assert logger.handlers[0].level == logging.ERROR

    def test_colored_formatter(self):
        formatter = ColoredFormatter("%(levelname)s %(message)s")
        record = logging.LogRecord("invoice_voucher", logging.WARNING, __file__, 1, "careful", None, None)
        assert "careful" in formatter.format(record)
