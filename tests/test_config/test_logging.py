"""Testes para config.logging.

Cobre: configure_logging, get_logger, log_degraded,
SessionContextFilter, create_json_formatter.
"""

from __future__ import annotations

import io
import json
import logging

import pytest

from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    SessionContextFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
    log_degraded,
)
from config.logging.config import DEFAULT_SERVICE_NAME, VALID_LOG_LEVELS


def _record(msg: str = "bootstrap_started", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestConfigureLogging:
    """Testes para configure_logging."""

    def test_configure_logging_levels(self) -> None:
        """Níveis válidos são aceitos sem diferenciar caixa."""
        configure_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_invalid_level_raises(self) -> None:
        """Nível inválido levanta ValueError."""
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="VERBOSE")

    def test_configure_logging_replaces_handlers_with_filter(self) -> None:
        """Um único handler JSON com o filtro de contexto."""
        configure_logging(service_name="svc", status_getter=lambda: "ready")
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert any(isinstance(f, SessionContextFilter) for f in handlers[0].filters)

    def test_constants(self) -> None:
        assert DEFAULT_SERVICE_NAME == "homeserver-session"
        assert "DEBUG" in VALID_LOG_LEVELS

    def test_get_logger_returns_named_logger(self) -> None:
        assert get_logger("session_core.test").name == "session_core.test"


class TestSessionContextFilter:
    """Injeção de correlation_id, service e client_status."""

    def test_filter_injects_context(self) -> None:
        context_filter = SessionContextFilter(
            "homeserver-session",
            correlation_id_getter=lambda: "bootstrap-abc",
            status_getter=lambda: "connecting",
        )
        record = _record()
        assert context_filter.filter(record) is True
        assert record.correlation_id == "bootstrap-abc"
        assert record.service == "homeserver-session"
        assert record.client_status == "connecting"

    def test_filter_preserves_explicit_values(self) -> None:
        context_filter = SessionContextFilter("svc", lambda: "auto", lambda: "idle")
        record = _record(correlation_id="manual", client_status="ready")
        context_filter.filter(record)
        assert record.correlation_id == "manual"
        assert record.client_status == "ready"

    def test_filter_without_getters_uses_empty_strings(self) -> None:
        record = _record()
        SessionContextFilter("svc").filter(record)
        assert record.correlation_id == ""
        assert record.client_status == ""


class TestJsonFormatter:
    """Saída JSON com campos renomeados."""

    def test_output_contains_required_fields(self) -> None:
        formatter = create_json_formatter()
        record = _record(correlation_id="c-1", service="svc", client_status="idle", homeserver="https://matrix.org")
        data = json.loads(formatter.format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "bootstrap_started"
        assert data["client_status"] == "idle"
        assert data["homeserver"] == "https://matrix.org"
        assert FIELD_RENAME_MAP["levelname"] == "level"
        assert "client_status" in REQUIRED_LOG_FIELDS


class TestLogDegraded:
    """log_degraded registra etapas toleradas."""

    def test_log_degraded_emits_warning_with_step(self) -> None:
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(create_json_formatter())
        handler.addFilter(SessionContextFilter("svc"))
        logger = logging.getLogger("test.degraded")
        logger.addHandler(handler)
        logger.propagate = False
        try:
            log_degraded(logger, "crypto_init", "keys_unavailable")
        finally:
            logger.removeHandler(handler)

        data = json.loads(stream.getvalue())
        assert data["level"] == "WARNING"
        assert data["degraded"] is True
        assert data["step"] == "crypto_init"
        assert data["reason"] == "keys_unavailable"

    def test_log_degraded_without_reason(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("test.degraded.noreason")
        with caplog.at_level(logging.WARNING, logger="test.degraded.noreason"):
            log_degraded(logger, "cache_warmup")
        record = caplog.records[-1]
        assert record.step == "cache_warmup"
        assert not hasattr(record, "reason")
