# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Observability for broker operations.

Every schema or query call runs inside :meth:`TelemetryManager.trace_operation`,
which can open an OpenTelemetry span, feed duration and count instruments,
write one log line per outcome, and notify user supplied hooks. All of it is
off unless :class:`TelemetryConfig` turns something on.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Protocol, Union, runtime_checkable

from opentelemetry import metrics, trace
from opentelemetry.trace import Status, StatusCode

from ..common.constants import (
    OTEL_ATTR_BROKER_CORRELATION_ID,
    OTEL_ATTR_BROKER_DOCUMENT,
    OTEL_ATTR_BROKER_ENTITY,
    OTEL_ATTR_BROKER_ROW_COUNT,
    OTEL_ATTR_DB_OPERATION,
    OTEL_ATTR_DB_SYSTEM,
)

_INSTRUMENTATION_NAME = "ServiceBroker.Xml"
_SCHEMA_URL = "https://opentelemetry.io/schemas/1.21.0"

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TelemetryConfig:
    """Switches for the broker's tracing, metrics, logging and hooks.

    :param enable_tracing: Open an OpenTelemetry span per operation.
    :param enable_metrics: Record ``xml_broker.operation.*`` instruments.
    :param enable_logging: Log each outcome through ``logger_name``.
    :param log_level: Level applied to that logger, e.g. ``"DEBUG"``.
    :param logger_name: Name of the outcome logger.
    :param hooks: Objects implementing any subset of :class:`TelemetryHook`.

    Example::

        config = BrokerConfig(
            xml_file_path="customers.xml",
            telemetry=TelemetryConfig(enable_tracing=True, hooks=[AuditHook()]),
        )
    """

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False

    log_level: str = "WARNING"
    logger_name: str = "ServiceBroker.Xml"

    hooks: List["TelemetryHook"] = field(default_factory=list)

    @property
    def any_enabled(self) -> bool:
        return bool(self.enable_tracing or self.enable_metrics or self.enable_logging or self.hooks)


@dataclass
class OperationContext:
    """State of one in-flight broker operation, shared with hooks."""

    correlation_id: str
    operation: str
    document: Optional[str] = None
    entity: Optional[str] = None
    start_time: float = field(default_factory=time.perf_counter)
    # free-form scratch space for hooks
    custom_data: Dict[str, Any] = field(default_factory=dict)
    _span: Any = field(default=None, repr=False)

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000


@dataclass
class OperationOutcome:
    """What an operation produced: its timing and row count, or the error it raised."""

    duration_ms: float
    row_count: Optional[int] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@runtime_checkable
class TelemetryHook(Protocol):
    """Callbacks a hook may implement. Missing methods are skipped.

    A hook that forwards timings to statsd::

        class StatsdHook:
            def __init__(self, client):
                self.client = client

            def on_operation_end(self, context, outcome):
                self.client.timing(f"xml_broker.{context.operation}", outcome.duration_ms)
    """

    def on_operation_start(self, context: OperationContext) -> None: ...

    def on_operation_end(self, context: OperationContext, outcome: OperationOutcome) -> None: ...

    def on_operation_error(self, context: OperationContext, error: Exception) -> None: ...


class TelemetryManager:
    """Drives spans, instruments, outcome logging and hooks for the broker.

    Internal; the broker builds one through :func:`create_telemetry_manager`.
    """

    def __init__(self, config: Optional[TelemetryConfig] = None) -> None:
        self._config = config or TelemetryConfig()
        self._hooks = list(self._config.hooks)
        self._tracer: Optional[Any] = None
        self._logger: Optional[logging.Logger] = None
        self._operation_duration: Optional[Any] = None
        self._operation_count: Optional[Any] = None
        self._error_count: Optional[Any] = None

        cfg = self._config
        if cfg.enable_tracing:
            self._tracer = trace.get_tracer(_INSTRUMENTATION_NAME, schema_url=_SCHEMA_URL)
        if cfg.enable_metrics:
            self._create_instruments(metrics.get_meter(_INSTRUMENTATION_NAME, schema_url=_SCHEMA_URL))
        if cfg.enable_logging:
            self._logger = logging.getLogger(cfg.logger_name)
            self._logger.setLevel(logging.getLevelName(cfg.log_level.upper()))

    @property
    def is_tracing_enabled(self) -> bool:
        return self._tracer is not None

    @property
    def is_metrics_enabled(self) -> bool:
        return self._operation_duration is not None

    def _create_instruments(self, meter: Any) -> None:
        self._operation_duration = meter.create_histogram(
            name="xml_broker.operation.duration",
            description="Time spent in a broker operation",
            unit="ms",
        )
        self._operation_count = meter.create_counter(
            name="xml_broker.operation.count",
            description="Broker operations performed",
            unit="1",
        )
        self._error_count = meter.create_counter(
            name="xml_broker.error.count",
            description="Broker operations that raised",
            unit="1",
        )

    def _start_span(self, ctx: OperationContext) -> Any:
        attributes: Dict[str, Any] = {
            OTEL_ATTR_DB_SYSTEM: "xml",
            OTEL_ATTR_DB_OPERATION: ctx.operation,
            OTEL_ATTR_BROKER_CORRELATION_ID: ctx.correlation_id,
        }
        if ctx.document:
            attributes[OTEL_ATTR_BROKER_DOCUMENT] = ctx.document
        if ctx.entity:
            attributes[OTEL_ATTR_BROKER_ENTITY] = ctx.entity
        name = " ".join(part for part in ("XmlBroker", ctx.operation, ctx.entity) if part)
        return self._tracer.start_span(name, kind=trace.SpanKind.INTERNAL, attributes=attributes)

    @contextmanager
    def trace_operation(
        self,
        operation: str,
        correlation_id: str,
        document: Optional[str] = None,
        entity: Optional[str] = None,
    ) -> Iterator[OperationContext]:
        """Run the enclosed block as one observed operation.

        The block reports success by calling :meth:`record_outcome`. An exception
        escaping the block is recorded as a failed outcome, marked on the span,
        passed to ``on_operation_error`` hooks, and re-raised unchanged::

            with telemetry.trace_operation("query.list", cid, path, "Customer") as ctx:
                rows = executor.execute(...)
                telemetry.record_outcome(ctx, row_count=len(rows))
        """
        ctx = OperationContext(correlation_id, operation, document=document, entity=entity)
        self._notify("on_operation_start", ctx)
        if self._tracer is not None:
            ctx._span = self._start_span(ctx)

        try:
            yield ctx
        except Exception as exc:
            if ctx._span is not None:
                ctx._span.set_status(Status(StatusCode.ERROR, str(exc)))
                ctx._span.record_exception(exc)
            self.record_outcome(ctx, error=exc)
            self._notify("on_operation_error", ctx, exc)
            raise
        finally:
            if ctx._span is not None:
                ctx._span.end()

    def record_outcome(
        self,
        ctx: OperationContext,
        row_count: Optional[int] = None,
        error: Optional[Exception] = None,
    ) -> OperationOutcome:
        """Publish an operation's outcome to every enabled sink.

        ``on_operation_end`` hooks only hear about successful outcomes.
        """
        outcome = OperationOutcome(ctx.elapsed_ms(), row_count=row_count, error=error)

        if ctx._span is not None and row_count is not None:
            ctx._span.set_attribute(OTEL_ATTR_BROKER_ROW_COUNT, row_count)

        if self._operation_duration is not None:
            labels: Dict[str, Any] = {"operation": ctx.operation, "success": outcome.succeeded}
            if ctx.entity:
                labels["entity"] = ctx.entity
            self._operation_duration.record(outcome.duration_ms, labels)
            self._operation_count.add(1, labels)
            if not outcome.succeeded:
                self._error_count.add(1, labels)

        if self._logger is not None:
            status = "ok" if outcome.succeeded else "failed"
            self._logger.log(
                logging.DEBUG if outcome.succeeded else logging.WARNING,
                "%s %s %s %.1fms",
                ctx.operation,
                ctx.entity or "-",
                status,
                outcome.duration_ms,
                extra={"correlation_id": ctx.correlation_id},
            )

        if outcome.succeeded:
            self._notify("on_operation_end", ctx, outcome)
        return outcome

    def _notify(self, callback: str, *args: Any) -> None:
        # a misbehaving hook must not change the operation's result
        for hook in self._hooks:
            method = getattr(hook, callback, None)
            if method is None:
                continue
            try:
                method(*args)
            except Exception:
                _log.debug("Telemetry hook %r failed in %s", hook, callback, exc_info=True)


class NoOpTelemetryManager:
    """Stand-in used when nothing in :class:`TelemetryConfig` is enabled."""

    @contextmanager
    def trace_operation(
        self,
        operation: str,
        correlation_id: str,
        document: Optional[str] = None,
        entity: Optional[str] = None,
    ) -> Iterator[OperationContext]:
        yield OperationContext(correlation_id, operation, document=document, entity=entity)

    def record_outcome(
        self,
        ctx: OperationContext,
        row_count: Optional[int] = None,
        error: Optional[Exception] = None,
    ) -> OperationOutcome:
        return OperationOutcome(ctx.elapsed_ms(), row_count=row_count, error=error)


def create_telemetry_manager(
    config: Optional[TelemetryConfig],
) -> Union[TelemetryManager, NoOpTelemetryManager]:
    """Return a real manager only when ``config`` enables at least one signal or hook."""
    if config is None or not config.any_enabled:
        return NoOpTelemetryManager()
    return TelemetryManager(config)


__all__ = [
    "TelemetryConfig",
    "TelemetryHook",
    "TelemetryManager",
    "NoOpTelemetryManager",
    "OperationContext",
    "OperationOutcome",
    "create_telemetry_manager",
]
