"""
Tests for enhanced logging configuration.
"""

import logging
from unittest.mock import patch

from inventory_server.structured_logging import enhanced_logging_config as logging_config
from inventory_server.structured_logging.enhanced_logging_config import (
    _CategoryFilter,
    _parse_max_bytes,
    add_correlation_id,
    bind_request_context,
    clear_request_context,
    detect_environment,
    get_current_context,
    sanitize_sensitive_data,
    setup_enhanced_logging,
)


class TestEnhancedLoggingConfig:
    """Test enhanced logging configuration functionality."""

    def test_sanitize_sensitive_data(self):
        """Sensitive keys are redacted, nested ones included."""
        event_dict = {
            "player_id": "alice",
            "password": "secret123",
            "nested": {"API_KEY": "key456", "item_name": "sword"},
        }

        result = sanitize_sensitive_data(None, None, event_dict)

        assert result["password"] == "[REDACTED]"
        assert result["nested"]["API_KEY"] == "[REDACTED]"
        assert result["nested"]["item_name"] == "sword"
        assert result["player_id"] == "alice"

    def test_add_correlation_id_keeps_existing(self):
        """A bound correlation id is not replaced."""
        assert add_correlation_id(None, None, {"correlation_id": "abc"})["correlation_id"] == "abc"
        assert add_correlation_id(None, None, {})["correlation_id"]

    def test_request_context_round_trip(self):
        """Bound call context is visible until cleared."""
        bind_request_context(correlation_id="c-1", player_id="alice", operation="give_item", item_name="sword")

        context = get_current_context()
        assert context["correlation_id"] == "c-1"
        assert context["player_id"] == "alice"
        assert context["item_name"] == "sword"

        clear_request_context()
        assert get_current_context() == {}

    def test_unset_context_values_are_not_bound(self):
        bind_request_context(operation="get_item_info")

        assert "player_id" not in get_current_context()
        clear_request_context()

    def test_detect_environment_under_pytest(self):
        assert detect_environment() == "unit_test"

    def test_parse_max_bytes(self):
        assert _parse_max_bytes("10MB") == 10 * 1024 * 1024
        assert _parse_max_bytes("512KB") == 512 * 1024
        assert _parse_max_bytes("100B") == 100
        assert _parse_max_bytes(2048) == 2048

    def test_category_filter_matches_prefixes(self):
        category_filter = _CategoryFilter(["inventory_server.persistence"])
        record = logging.LogRecord("inventory_server.persistence.data_store", logging.INFO, "", 0, "msg", None, None)
        other = logging.LogRecord("inventory_server.api.items", logging.INFO, "", 0, "msg", None, None)

        assert category_filter.filter(record)
        assert not category_filter.filter(other)

    @patch("inventory_server.structured_logging.enhanced_logging_config.configure_enhanced_structlog")
    def test_setup_enhanced_logging_is_idempotent(self, mock_configure_structlog, monkeypatch):
        """Multiple invocations configure structlog once."""
        monkeypatch.setattr(logging_config, "_LOGGING_INITIALIZED", False)
        monkeypatch.setattr(logging_config, "_LOGGING_SIGNATURE", None)
        config = {"logging": {"environment": "unit_test", "level": "DEBUG", "disable_logging": True}}

        setup_enhanced_logging(config)
        setup_enhanced_logging(config)

        mock_configure_structlog.assert_called_once_with("unit_test", "DEBUG", config["logging"])

    @patch("inventory_server.structured_logging.enhanced_logging_config.configure_enhanced_structlog")
    def test_force_reconfigure(self, mock_configure_structlog, monkeypatch):
        monkeypatch.setattr(logging_config, "_LOGGING_INITIALIZED", True)
        monkeypatch.setattr(logging_config, "_LOGGING_SIGNATURE", "previous")

        setup_enhanced_logging({"logging": {"disable_logging": True}}, force_reconfigure=True)

        mock_configure_structlog.assert_called_once()

    def test_file_logging_writes_category_files(self, tmp_path):
        """Each subsystem gets its own rotating log file."""
        root_logger = logging.getLogger()
        handlers_before = list(root_logger.handlers)
        level_before = root_logger.level
        try:
            logging_config._setup_enhanced_file_logging(
                "unit_test",
                {"log_base": str(tmp_path), "console": False},
                "INFO",
            )
            logging.getLogger("inventory_server.persistence.data_store").info("stored")

            assert (tmp_path / "unit_test" / "persistence.log").read_text().strip() == "stored"
            assert (tmp_path / "unit_test" / "items.log").read_text() == ""
        finally:
            for handler in list(root_logger.handlers):
                if handler not in handlers_before:
                    root_logger.removeHandler(handler)
                    handler.close()
            root_logger.setLevel(level_before)
