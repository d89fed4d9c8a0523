"""
Unit tests for structured logging and Prometheus metrics helpers.
"""

import json
import logging

import pytest

from psp_analytics.observability.logger import (
    CustomJsonFormatter,
    get_logger,
    log_operation,
    setup_logger,
)
from psp_analytics.observability.metrics import (
    analysis_pass_duration_seconds,
    generate_metrics,
    get_sample_value,
    increment_counter,
    journeys_built_total,
    set_gauge,
    track_duration,
    weighted_success_rate,
    write_metrics,
)


@pytest.mark.unit
class TestLogger:
    """Tests for logger setup"""

    def test_level_from_env(self, monkeypatch):
        """Test LOG_LEVEL"""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        logger = setup_logger("tests.observability.level")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_reconfigure_does_not_duplicate_handlers(self):
        """Test that repeated setup keeps one handler"""
        setup_logger("tests.observability.dupes")
        logger = setup_logger("tests.observability.dupes")
        assert len(logger.handlers) == 1

    def test_json_format(self):
        """Test that JSON output carries level, logger and extra fields"""
        logger = setup_logger("tests.observability.json", level="INFO", format_type="json")
        formatter = logger.handlers[0].formatter
        assert isinstance(formatter, CustomJsonFormatter)

        record = logger.makeRecord(
            logger.name, logging.INFO, __file__, 1, "Built journeys", None, None,
            extra={"journeys": 3},
        )
        payload = json.loads(formatter.format(record))
        assert payload["message"] == "Built journeys"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "tests.observability.json"
        assert payload["journeys"] == 3

    def test_text_format(self):
        """Test LOG_FORMAT=text"""
        logger = setup_logger("tests.observability.text", format_type="text")
        assert not isinstance(logger.handlers[0].formatter, CustomJsonFormatter)

    def test_get_logger_configures_once(self):
        """Test that get_logger reuses a configured logger"""
        first = get_logger("tests.observability.once")
        assert get_logger("tests.observability.once") is first
        assert len(first.handlers) == 1


@pytest.mark.unit
class TestLogOperation:
    """Tests for the log_operation context manager"""

    def test_success(self, caplog):
        """Test completion logging with duration"""
        logger = logging.getLogger("tests.observability.operation")
        logger.propagate = True
        with caplog.at_level(logging.DEBUG, logger=logger.name):
            with log_operation("Building journeys", logger=logger, transactions=2) as operation:
                pass

        assert operation.duration is not None
        completed = [r for r in caplog.records if r.getMessage() == "Completed: Building journeys"]
        assert completed and completed[0].status == "success"
        assert completed[0].transactions == 2

    def test_failure_propagates(self, caplog):
        """Test that errors are logged and re-raised"""
        logger = logging.getLogger("tests.observability.failure")
        logger.propagate = True
        with caplog.at_level(logging.ERROR, logger=logger.name):
            with pytest.raises(RuntimeError):
                with log_operation("Broken pass", logger=logger):
                    raise RuntimeError("boom")

        failed = [r for r in caplog.records if r.getMessage() == "Failed: Broken pass"]
        assert failed and failed[0].error_type == "RuntimeError"
        assert failed[0].exc_info is not None


@pytest.mark.unit
class TestMetricsHelpers:
    """Tests for Prometheus helpers on the package registry"""

    def test_increment_counter(self):
        """Test labelled increments and the non-positive guard"""
        before = get_sample_value("psp_journeys_built_total", {"status": "success"})
        increment_counter(journeys_built_total, 2, status="success")
        increment_counter(journeys_built_total, 0, status="success")
        assert get_sample_value("psp_journeys_built_total", {"status": "success"}) == before + 2

    def test_set_gauge(self):
        """Test gauge helper"""
        set_gauge(weighted_success_rate, 42.5, view="psp_level")
        assert get_sample_value("psp_weighted_success_rate", {"view": "psp_level"}) == 42.5

    def test_track_duration(self):
        """Test that a timed block is observed once"""
        labels = {"pass_name": "unit_test"}
        before = get_sample_value("psp_analysis_pass_duration_seconds_count", labels)
        with track_duration(analysis_pass_duration_seconds, **labels):
            pass
        assert get_sample_value("psp_analysis_pass_duration_seconds_count", labels) == before + 1

    def test_unknown_sample_is_zero(self):
        """Test the default for samples never recorded"""
        assert get_sample_value("psp_does_not_exist_total") == 0.0

    def test_exposition(self):
        """Test Prometheus text output"""
        text = generate_metrics().decode()
        assert "psp_transactions_ingested_total" in text

    def test_write_metrics(self, tmp_path):
        """Test writing the exposition to a file"""
        target = tmp_path / "metrics.prom"
        set_gauge(weighted_success_rate, 75.0, view="transaction_level")
        write_metrics(str(target))
        text = target.read_text()
        assert 'psp_weighted_success_rate{view="transaction_level"} 75.0' in text
        assert not (tmp_path / "metrics.prom.tmp").exists()
