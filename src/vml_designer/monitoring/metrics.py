"""
Metrics Collection
Prometheus metrics for the designer runtime
"""

import time
from contextlib import contextmanager
from typing import Callable

from prometheus_client import Counter, Gauge, Histogram, generate_latest


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the designer runtime.
    """

    def __init__(self) -> None:
        # Dispatcher metrics
        self.commands_total = Counter(
            "vml_commands_total",
            "Total number of dispatched commands",
            ["command", "status"],
        )
        self.command_duration = Histogram(
            "vml_command_duration_seconds",
            "Command dispatch duration in seconds",
            ["kind"],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
        )

        # Script metrics
        self.script_runs_total = Counter(
            "vml_script_runs_total",
            "Total number of script invocations",
            ["interpreter", "status"],
        )
        self.script_duration = Histogram(
            "vml_script_duration_seconds",
            "Script execution duration in seconds",
            ["interpreter"],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0, 60.0],
        )
        self.script_sessions = Gauge(
            "vml_script_sessions",
            "Live named interpreter sessions",
            ["interpreter"],
        )

        # Import / materialize metrics
        self.imports_total = Counter(
            "vml_imports_total",
            "Document imports by outcome",
            ["outcome"],
        )
        self.materializations_total = Counter(
            "vml_materializations_total",
            "Number of materialized trees",
            ["status"],
        )
        self.property_errors_total = Counter(
            "vml_property_errors_total",
            "Properties skipped during application",
            ["reason"],
        )

        # Sync metrics
        self.flushes_total = Counter(
            "vml_flushes_total",
            "Flat property record flushes",
        )
        self.flushed_properties = Counter(
            "vml_flushed_properties_total",
            "Properties written by flushes",
        )

        # Error metrics
        self.errors_total = Counter(
            "vml_errors_total",
            "Total number of contained errors",
            ["error_type", "component"],
        )

        # System metrics
        self.uptime = Gauge(
            "vml_uptime_seconds",
            "Runtime uptime in seconds",
        )
        self.start_time = time.time()

    def record_command(self, command: str, status: str, duration: float, kind: str) -> None:
        """Record a dispatched command."""
        self.commands_total.labels(command=command, status=status).inc()
        self.command_duration.labels(kind=kind).observe(duration)

    def record_script_run(self, interpreter: str, status: str, duration: float) -> None:
        """Record a script invocation."""
        self.script_runs_total.labels(interpreter=interpreter, status=status).inc()
        self.script_duration.labels(interpreter=interpreter).observe(duration)

    def set_sessions(self, interpreter: str, count: int) -> None:
        self.script_sessions.labels(interpreter=interpreter).set(count)

    def record_import(self, outcome: str) -> None:
        """Record an import outcome (hit, miss, error)."""
        self.imports_total.labels(outcome=outcome).inc()

    def record_materialization(self, status: str) -> None:
        self.materializations_total.labels(status=status).inc()

    def record_property_error(self, reason: str) -> None:
        self.property_errors_total.labels(reason=reason).inc()

    def record_flush(self, written: int) -> None:
        """Record a flush and how many properties it wrote."""
        self.flushes_total.inc()
        self.flushed_properties.inc(written)

    def record_error(self, error_type: str, component: str) -> None:
        """Record a contained error."""
        self.errors_total.labels(error_type=error_type, component=component).inc()

    def update_uptime(self) -> None:
        """Update the uptime metric."""
        self.uptime.set(time.time() - self.start_time)

    @contextmanager
    def measure_duration(self, callback: Callable[[float], None]):
        """Context manager to measure operation duration."""
        start = time.perf_counter()
        try:
            yield
        finally:
            callback(time.perf_counter() - start)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        self.update_uptime()
        return generate_latest()


# Global metrics collector instance
metrics_collector = MetricsCollector()
