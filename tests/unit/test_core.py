import json
import logging
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI

from moviemood.config.logging import JsonFormatter, RequestContextFilter, request_id_var
from moviemood.config.settings import Settings
from moviemood.core.exceptions import (
    AuthenticationError,
    EmptyResultError,
    InvalidTokenError,
    MalformedResponseError,
    PersistenceError,
    UnexpectedShapeError,
    UpstreamServiceError,
)
from moviemood.core.telemetry import setup_telemetry


class TestExceptions:
    @pytest.mark.parametrize(
        "exc, status, code, message",
        [
            (UpstreamServiceError("socket closed"), 503, "UPSTREAM_SERVICE_ERROR",
             "AI service temporarily unavailable"),
            (MalformedResponseError("raw {model text"), 502, "INVALID_RESPONSE_FORMAT",
             "AI returned invalid response format"),
            (UnexpectedShapeError("dict"), 502, "INVALID_RESPONSE_FORMAT",
             "AI returned invalid response format"),
            (EmptyResultError(3), 502, "NO_VALID_RECOMMENDATIONS",
             "No valid movie recommendations could be generated"),
            (PersistenceError("read", "deadline"), 500, "PERSISTENCE_ERROR",
             "Failed to fetch history"),
            (AuthenticationError(), 401, "AUTHENTICATION_REQUIRED", "Authentication required"),
            (InvalidTokenError("expired"), 401, "INVALID_TOKEN", "Invalid or expired token"),
        ],
    )
    def test_user_safe_payload(self, exc, status, code, message):
        body = exc.to_dict()

        assert exc.status_code == status
        assert body == {"error": {"code": code, "message": message, "details": {}}}

    def test_diagnostics_not_serialized(self):
        exc = MalformedResponseError("raw {model text", reason="Expecting value")
        serialized = json.dumps(exc.to_dict())

        assert exc.cleaned_text == "raw {model text"
        assert "model text" not in serialized
        assert "Expecting" not in serialized


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.MIN_RECOMMENDATIONS == 3
        assert settings.MAX_RECOMMENDATIONS == 5
        assert settings.HISTORY_LIMIT == 10
        assert settings.FIRESTORE_COLLECTION == "searches"

    def test_api_key_alias(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("GOOGLE_GENAI_API_KEY", "alt-key")

        assert Settings(_env_file=None).GEMINI_API_KEY == "alt-key"


class TestLogging:
    def _record(self, **extra):
        record = logging.LogRecord("moviemood.test", logging.INFO, __file__, 1, "hello %s", ("x",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter(self):
        output = json.loads(JsonFormatter().format(self._record(request_id="r1", user_id="u1")))

        assert output["message"] == "hello x"
        assert output["level"] == "INFO"
        assert output["request_id"] == "r1"
        assert output["user_id"] == "u1"

    def test_request_context_filter(self):
        token = request_id_var.set("req-42")
        try:
            record = self._record()
            assert RequestContextFilter().filter(record) is True
            assert record.request_id == "req-42"
        finally:
            request_id_var.reset(token)


class TestTelemetry:
    @patch("moviemood.core.telemetry.get_settings")
    @patch("moviemood.core.telemetry.Instrumentator")
    def test_setup_telemetry_prometheus_enabled(self, mock_instrumentator, mock_get_settings):
        mock_settings = MagicMock()
        mock_settings.ENABLE_PROMETHEUS = True
        mock_settings.ENABLE_OTEL = False
        mock_get_settings.return_value = mock_settings

        app = FastAPI()
        setup_telemetry(app)

        mock_instrumentator.assert_called_once()
        mock_instrumentator.return_value.instrument.assert_called_once_with(app)

    @patch("moviemood.core.telemetry.get_settings")
    @patch("moviemood.core.telemetry.OTLPSpanExporter")
    @patch("moviemood.core.telemetry.BatchSpanProcessor")
    @patch("moviemood.core.telemetry.FastAPIInstrumentor")
    @patch("moviemood.core.telemetry.trace")
    def test_setup_telemetry_otel_enabled(
        self, mock_trace, mock_fastapi_instr, mock_processor, mock_exporter, mock_get_settings
    ):
        mock_settings = MagicMock()
        mock_settings.ENABLE_PROMETHEUS = False
        mock_settings.ENABLE_OTEL = True
        mock_settings.APP_NAME = "test"
        mock_settings.APP_VERSION = "1.0"
        mock_settings.DEBUG = False
        mock_settings.GEMINI_MODEL = "gemini-test"
        mock_get_settings.return_value = mock_settings

        app = FastAPI()
        setup_telemetry(app)

        mock_fastapi_instr.instrument_app.assert_called_once()
        mock_processor.assert_called_once()
        mock_trace.set_tracer_provider.assert_called_once()
