"""Interlace metrics collection.

In-process, Prometheus-compatible counters and histograms recorded by the
registry and the discovery engine. ``export_prometheus`` renders the text
exposition format so a host application can serve it however it likes.

Example:
    >>> from interlace.observability.metrics import get_metrics
    >>> metrics = get_metrics()
    >>> metrics.increment_counter("interlace_discoveries_total", {"channel": "/menu"})
    >>> print(metrics.export_prometheus())
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import ClassVar

LabelKey = tuple[tuple[str, str], ...]


def _label_key(labels: dict[str, str] | None) -> LabelKey:
    return tuple(sorted((labels or {}).items()))


@dataclass
class Counter:
    """A monotonically increasing counter metric."""

    name: str
    help_text: str
    values: dict[LabelKey, float] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def increment(self, labels: dict[str, str] | None = None, value: float = 1.0) -> None:
        key = _label_key(labels)
        with self._lock:
            self.values[key] = self.values.get(key, 0.0) + value

    def get(self, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            return self.values.get(_label_key(labels), 0.0)


# Handlers are expected to be fast, so buckets start well below a millisecond
DEFAULT_LATENCY_BUCKETS = (0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0)


@dataclass
class HistogramSeries:
    """Bucket counts, sum and count for one label combination."""

    buckets: dict[float, float]
    total: float = 0.0
    count: float = 0.0


@dataclass
class Histogram:
    """A histogram metric for measuring distributions."""

    name: str
    help_text: str
    buckets: tuple[float, ...] = DEFAULT_LATENCY_BUCKETS
    values: dict[LabelKey, HistogramSeries] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def observe(self, value: float, labels: dict[str, str] | None = None) -> None:
        key = _label_key(labels)
        with self._lock:
            series = self.values.get(key)
            if series is None:
                series = HistogramSeries(buckets=dict.fromkeys(self.buckets, 0.0))
                self.values[key] = series
            for bound in self.buckets:
                if value <= bound:
                    series.buckets[bound] += 1.0
            series.total += value
            series.count += 1.0

    def get_count(self, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            series = self.values.get(_label_key(labels))
            return series.count if series is not None else 0.0


class MetricsCollector:
    """Thread-safe collection of the engine's counters and histograms.

    Unknown metric names are ignored by ``increment_counter`` and
    ``observe_histogram``; register them first with ``register_counter`` or
    ``register_histogram``.
    """

    DEFAULT_COUNTERS: ClassVar[dict[str, str]] = {
        "interlace_registrations_total": "Total number of accepted handler registrations",
        "interlace_registrations_rejected_total": "Total number of rejected handler candidates",
        "interlace_discoveries_total": "Total number of discovery calls",
        "interlace_handler_invocations_total": "Total number of handler invocations",
        "interlace_handler_errors_total": "Total number of handler invocation failures",
        "interlace_results_accepted_total": "Total number of results accepted",
        "interlace_results_discarded_total": "Total number of results discarded on type",
    }

    DEFAULT_HISTOGRAMS: ClassVar[dict[str, str]] = {
        "interlace_discovery_duration_seconds": "Discovery call duration in seconds",
        "interlace_handler_duration_seconds": "Handler invocation duration in seconds",
    }

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, Counter] = {}
        self._histograms: dict[str, Histogram] = {}
        self._start_time = time.time()

        for name, help_text in self.DEFAULT_COUNTERS.items():
            self._counters[name] = Counter(name=name, help_text=help_text)
        for name, help_text in self.DEFAULT_HISTOGRAMS.items():
            self._histograms[name] = Histogram(name=name, help_text=help_text)

    def register_counter(self, name: str, help_text: str) -> None:
        with self._lock:
            if name not in self._counters:
                self._counters[name] = Counter(name=name, help_text=help_text)

    def register_histogram(
        self, name: str, help_text: str, buckets: tuple[float, ...] = DEFAULT_LATENCY_BUCKETS
    ) -> None:
        with self._lock:
            if name not in self._histograms:
                self._histograms[name] = Histogram(name=name, help_text=help_text, buckets=buckets)

    def increment_counter(
        self, name: str, labels: dict[str, str] | None = None, value: float = 1.0
    ) -> None:
        with self._lock:
            counter = self._counters.get(name)
        if counter is not None:
            counter.increment(labels, value)

    def observe_histogram(
        self, name: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        with self._lock:
            histogram = self._histograms.get(name)
        if histogram is not None:
            histogram.observe(value, labels)

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            counter = self._counters.get(name)
        return counter.get(labels) if counter is not None else 0.0

    def get_histogram_count(self, name: str, labels: dict[str, str] | None = None) -> float:
        with self._lock:
            histogram = self._histograms.get(name)
        return histogram.get_count(labels) if histogram is not None else 0.0

    @staticmethod
    def _format_labels(labels: LabelKey, extra: str = "") -> str:
        def escape(value: str) -> str:
            return value.replace("\\", "\\\\").replace('"', '\\"')

        parts = [f'{k}="{escape(v)}"' for k, v in labels]
        if extra:
            parts.append(extra)
        return "{" + ",".join(parts) + "}" if parts else ""

    def export_prometheus(self) -> str:
        """Export all metrics in Prometheus text format.

        Example:
            >>> collector = MetricsCollector()
            >>> collector.increment_counter("interlace_discoveries_total")
            >>> "interlace_discoveries_total 1.0" in collector.export_prometheus()
            True
        """
        lines: list[str] = []

        with self._lock:
            counters = list(self._counters.values())
            histograms = list(self._histograms.values())

        for counter in counters:
            lines.append(f"# HELP {counter.name} {counter.help_text}")
            lines.append(f"# TYPE {counter.name} counter")
            with counter._lock:
                items = list(counter.values.items())
            if not items:
                lines.append(f"{counter.name} 0")
            for label_key, value in items:
                lines.append(f"{counter.name}{self._format_labels(label_key)} {value}")

        for histogram in histograms:
            lines.append(f"# HELP {histogram.name} {histogram.help_text}")
            lines.append(f"# TYPE {histogram.name} histogram")
            with histogram._lock:
                series_items = [
                    (key, dict(s.buckets), s.total, s.count) for key, s in histogram.values.items()
                ]
            if not series_items:
                for bound in histogram.buckets:
                    lines.append(f'{histogram.name}_bucket{{le="{bound}"}} 0')
                lines.append(f'{histogram.name}_bucket{{le="+Inf"}} 0')
                lines.append(f"{histogram.name}_sum 0")
                lines.append(f"{histogram.name}_count 0")
            for label_key, buckets, total, count in series_items:
                # Bucket counts are stored per bound and already cumulative
                for bound in histogram.buckets:
                    label_str = self._format_labels(label_key, f'le="{bound}"')
                    lines.append(f"{histogram.name}_bucket{label_str} {buckets[bound]}")
                label_str = self._format_labels(label_key, 'le="+Inf"')
                lines.append(f"{histogram.name}_bucket{label_str} {count}")
                base_labels = self._format_labels(label_key)
                lines.append(f"{histogram.name}_sum{base_labels} {total}")
                lines.append(f"{histogram.name}_count{base_labels} {count}")

        uptime = time.time() - self._start_time
        lines.append("# HELP interlace_process_uptime_seconds Time since collector creation")
        lines.append("# TYPE interlace_process_uptime_seconds gauge")
        lines.append(f"interlace_process_uptime_seconds {uptime:.3f}")

        return "\n".join(lines) + "\n"

    def reset(self) -> None:
        """Reset all metrics to zero. Useful for testing."""
        with self._lock:
            for counter in self._counters.values():
                with counter._lock:
                    counter.values.clear()
            for histogram in self._histograms.values():
                with histogram._lock:
                    histogram.values.clear()


_metrics_collector: MetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics() -> MetricsCollector:
    """Get the global metrics collector instance."""
    global _metrics_collector
    with _collector_lock:
        if _metrics_collector is None:
            _metrics_collector = MetricsCollector()
        return _metrics_collector


def reset_metrics() -> None:
    """Reset the global metrics collector. Useful for testing."""
    with _collector_lock:
        if _metrics_collector is not None:
            _metrics_collector.reset()
