"""
Unit Tests - Configuration and logging setup
"""

import logging

from warranty_invoice.config import ConfigurationManager, get_config
from warranty_invoice.utils.logger import get_logger, set_level, setup_logger


class TestConfiguration:
    """Tests for the settings singleton"""

    def test_defaults_from_settings_file(self):
        assert get_config("validation.total_tolerance") == 2.0
        assert get_config("pipeline.confidence_threshold") == 60
        assert get_config("ocr.tesseract.lang") == "nor+eng"

    def test_missing_key_returns_default(self):
        assert get_config("does.not.exist", "fallback") == "fallback"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("OPENAI_BASE_URL", "https://proxy.test/v1")

        assert get_config("ai.api_key") == "sk-env"
        assert get_config("ai.base_url") == "https://proxy.test/v1"

    def test_custom_config_file(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.yaml"
        path.write_text("pipeline:\n  confidence_threshold: 70\n", encoding="utf-8")
        monkeypatch.setenv("WARRANTY_INVOICE_CONFIG", str(path))

        assert get_config("pipeline.confidence_threshold") == 70

    def test_set_creates_sections(self):
        ConfigurationManager().set("ai.vision.model", "gpt-4o-mini")

        assert get_config("ai.vision.model") == "gpt-4o-mini"


class TestLogger:
    """Tests for the package logger namespace"""

    def test_module_loggers_share_namespace(self):
        assert get_logger("extraction.pipeline").name == "warranty_invoice.extraction.pipeline"
        assert get_logger("warranty_invoice.ocr_engine").name == "warranty_invoice.ocr_engine"

    def test_setup_logger_level(self):
        logger = setup_logger(level="WARNING", colorize=False)

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_set_level_updates_handlers(self):
        logger = setup_logger(level="INFO", colorize=False)

        set_level("DEBUG")

        assert logger.level == logging.DEBUG
        assert all(handler.level == logging.DEBUG for handler in logger.handlers)
