"""Tests for structured logging."""
import structlog
from structlog.contextvars import get_contextvars, merge_contextvars

from salon_calendar.logging_config import (
    generate_request_id,
    get_logger,
    request_context,
    setup_structured_logging,
)


class TestStructuredLogging:
    """Test structured logging setup and request IDs."""

    def test_setup_configures_structlog(self):
        setup_structured_logging(log_level="INFO")
        logger = get_logger(__name__)

        assert hasattr(logger, 'info')
        assert hasattr(logger, 'error')
        assert hasattr(logger, 'warning')

    def test_logger_methods_work(self):
        """Key-value events should not raise."""
        setup_structured_logging(log_level="DEBUG")
        logger = get_logger(__name__)

        logger.debug("view_transition", current="week_grid", intended="day_staff_grid")
        logger.info("appointments_loaded", count=3)
        logger.warning("stale_fetch_discarded", seq=1)
        logger.error("api_request_failed", endpoint="/appointments")

    def test_level_name_is_case_insensitive(self):
        """SALON_LOG_LEVEL=warning is accepted."""
        setup_structured_logging(log_level="warning")
        get_logger(__name__).warning("lowercase_level_ok")

    def test_generate_request_id_format(self):
        request_id = generate_request_id()

        assert request_id.startswith("req-")
        assert len(request_id) == 16  # "req-" (4) + 12 hex chars
        int(request_id[4:], 16)

        assert request_id != generate_request_id()

    def test_context_is_merged_into_events(self):
        setup_structured_logging(log_level="INFO")
        assert merge_contextvars in structlog.get_config()["processors"]

    def test_request_context_binds_and_unbinds(self):
        with request_context() as request_id:
            assert request_id.startswith("req-")
            assert get_contextvars()["request_id"] == request_id
        assert "request_id" not in get_contextvars()

    def test_request_context_keeps_given_id(self):
        with request_context("req-fixed") as request_id:
            assert request_id == "req-fixed"
            assert get_contextvars()["request_id"] == "req-fixed"
