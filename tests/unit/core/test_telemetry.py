# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for telemetry infrastructure."""

import logging

import pytest
from unittest.mock import MagicMock

from ServiceBroker.Xml.core.telemetry import (
    NoOpTelemetryManager,
    OperationContext,
    OperationOutcome,
    TelemetryConfig,
    TelemetryManager,
    create_telemetry_manager,
)


class TestTelemetryConfig:
    """Tests for TelemetryConfig dataclass."""

    def test_default_values(self):
        config = TelemetryConfig()
        assert config.enable_tracing is False
        assert config.enable_metrics is False
        assert config.enable_logging is False
        assert config.log_level == "WARNING"
        assert config.hooks == []

    def test_immutability(self):
        config = TelemetryConfig(enable_tracing=True)
        with pytest.raises(AttributeError):
            config.enable_tracing = False


class TestTelemetryManagerFactory:
    """Tests for create_telemetry_manager factory."""

    def test_returns_noop_when_config_none(self):
        assert isinstance(create_telemetry_manager(None), NoOpTelemetryManager)

    def test_returns_noop_when_all_disabled(self):
        assert isinstance(create_telemetry_manager(TelemetryConfig()), NoOpTelemetryManager)

    @pytest.mark.parametrize(
        "config",
        [
            TelemetryConfig(enable_tracing=True),
            TelemetryConfig(enable_metrics=True),
            TelemetryConfig(enable_logging=True),
            TelemetryConfig(hooks=[MagicMock()]),
        ],
    )
    def test_returns_manager_when_enabled(self, config):
        assert isinstance(create_telemetry_manager(config), TelemetryManager)


class TestTelemetryManager:
    """Tests for TelemetryManager."""

    def test_trace_operation_creates_context(self):
        manager = TelemetryManager(TelemetryConfig(enable_logging=True))

        with manager.trace_operation("query.list", "corr-1", document="store.xml", entity="Customer") as ctx:
            assert ctx.operation == "query.list"
            assert ctx.correlation_id == "corr-1"
            assert ctx.document == "store.xml"
            assert ctx.entity == "Customer"

    def test_hooks_dispatched_on_start_and_end(self):
        hook = MagicMock()
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))

        with manager.trace_operation("schema.describe", "corr-1") as ctx:
            outcome = manager.record_outcome(ctx, row_count=2)

        hook.on_operation_start.assert_called_once_with(ctx)
        hook.on_operation_end.assert_called_once_with(ctx, outcome)
        assert outcome.row_count == 2
        assert outcome.duration_ms >= 0

    def test_hooks_dispatched_on_error(self):
        hook = MagicMock()
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))

        with pytest.raises(ValueError):
            with manager.trace_operation("query.read", "corr-1"):
                raise ValueError("boom")

        hook.on_operation_error.assert_called_once()
        hook.on_operation_end.assert_not_called()

    def test_hook_errors_do_not_break_operation(self):
        hook = MagicMock()
        hook.on_operation_start.side_effect = Exception("Hook error")
        hook.on_operation_end.side_effect = Exception("Hook error")
        manager = TelemetryManager(TelemetryConfig(hooks=[hook]))

        with manager.trace_operation("query.list", "corr-1") as ctx:
            manager.record_outcome(ctx, row_count=0)

    def test_metrics_recorded(self):
        manager = TelemetryManager(TelemetryConfig(enable_metrics=True))
        manager._operation_duration = MagicMock()
        manager._operation_count = MagicMock()
        manager._error_count = MagicMock()

        ctx = OperationContext(correlation_id="corr-1", operation="query.list", entity="Customer")
        manager.record_outcome(ctx, row_count=3)
        manager.record_outcome(ctx, error=RuntimeError("x"))

        assert manager._operation_duration.record.call_count == 2
        assert manager._operation_count.add.call_count == 2
        manager._error_count.add.assert_called_once()
        _, attributes = manager._error_count.add.call_args[0]
        assert attributes == {"operation": "query.list", "success": False, "entity": "Customer"}

    def test_span_attributes(self):
        manager = TelemetryManager(TelemetryConfig(enable_tracing=True))
        span = MagicMock()
        manager._tracer = MagicMock()
        manager._tracer.start_span.return_value = span

        with manager.trace_operation("query.list", "corr-1", entity="Customer") as ctx:
            manager.record_outcome(ctx, row_count=4)

        name = manager._tracer.start_span.call_args[0][0]
        assert name == "XmlBroker query.list Customer"
        span.set_attribute.assert_called_once_with("xml_broker.row_count", 4)
        span.end.assert_called_once()

    def test_logging_outcome(self, caplog):
        manager = TelemetryManager(TelemetryConfig(enable_logging=True, log_level="DEBUG", logger_name="xml.test"))
        with caplog.at_level(logging.DEBUG, logger="xml.test"):
            with manager.trace_operation("query.read", "corr-1", entity="Customer") as ctx:
                manager.record_outcome(ctx, row_count=1)
        assert "query.read Customer ok" in caplog.text


class TestNoOpTelemetryManager:
    def test_trace_operation_yields_context(self):
        manager = NoOpTelemetryManager()
        with manager.trace_operation("query.list", "corr-1", entity="Customer") as ctx:
            outcome = manager.record_outcome(ctx, row_count=5)
        assert isinstance(outcome, OperationOutcome)
        assert outcome.row_count == 5
        assert ctx.entity == "Customer"
