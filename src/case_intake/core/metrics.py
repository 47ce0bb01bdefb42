"""
Prometheus-style metrics for monitoring case intake.

Provides counters, gauges, and timers for:
- Intake runs (success/failure, failing stage)
- Extracted file counts
- Watcher polls and pending archives
"""

import time
import logging
from typing import Dict, List, Optional
from datetime import datetime
from collections import defaultdict

logger = logging.getLogger(__name__)


class MetricsCollector:
    """In-process metrics collector with Prometheus text output."""

    def __init__(self):
        self.counters: Dict[str, int] = defaultdict(int)
        self.gauges: Dict[str, float] = {}
        self.histograms: Dict[str, List[float]] = defaultdict(list)
        self.start_times: Dict[str, float] = {}

    def increment(self, metric_name: str, value: int = 1, labels: Optional[Dict[str, str]] = None):
        key = self._make_key(metric_name, labels)
        self.counters[key] += value
        logger.debug(f"[METRIC] {key} += {value} (total: {self.counters[key]})")

    def set_gauge(self, metric_name: str, value: float, labels: Optional[Dict[str, str]] = None):
        key = self._make_key(metric_name, labels)
        self.gauges[key] = value
        logger.debug(f"[METRIC] {key} = {value}")

    def observe(self, metric_name: str, value: float, labels: Optional[Dict[str, str]] = None):
        key = self._make_key(metric_name, labels)
        self.histograms[key].append(value)
        logger.debug(f"[METRIC] {key} observed: {value}")

    def start_timer(self, metric_name: str, labels: Optional[Dict[str, str]] = None):
        key = self._make_key(metric_name, labels)
        self.start_times[key] = time.monotonic()

    def stop_timer(self, metric_name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Stop a timer and record its duration as <metric_name>_duration_seconds."""
        key = self._make_key(metric_name, labels)
        started = self.start_times.pop(key, None)
        if started is None:
            return None
        duration = time.monotonic() - started
        self.observe(f"{metric_name}_duration_seconds", duration, labels)
        return duration

    def _make_key(self, metric_name: str, labels: Optional[Dict[str, str]]) -> str:
        if labels:
            label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
            return f"{metric_name}{{{label_str}}}"
        return metric_name

    def format_prometheus(self) -> str:
        """Format metrics in Prometheus text format."""
        lines = [
            "# Case Intake Metrics",
            f"# Generated at {datetime.now().isoformat()}",
            "",
        ]

        for key, value in sorted(self.counters.items()):
            lines.append(f"# TYPE {key.split('{')[0]} counter")
            lines.append(f"{key} {value}")

        for key, value in sorted(self.gauges.items()):
            lines.append(f"# TYPE {key.split('{')[0]} gauge")
            lines.append(f"{key} {value}")

        # Histograms are rendered as summaries
        for key, values in sorted(self.histograms.items()):
            if values:
                lines.append(f"# TYPE {key.split('{')[0]} summary")
                lines.append(f"{key}_count {len(values)}")
                lines.append(f"{key}_sum {sum(values)}")
                lines.append(f"{key}_min {min(values)}")
                lines.append(f"{key}_max {max(values)}")

        return "\n".join(lines)

    def log_summary(self):
        logger.info("=" * 70)
        logger.info("INTAKE METRICS SUMMARY")
        logger.info("=" * 70)
        for key, value in sorted(self.counters.items()):
            logger.info(f"  {key}: {value}")
        for key, value in sorted(self.gauges.items()):
            logger.info(f"  {key}: {value}")
        for key, values in sorted(self.histograms.items()):
            if values:
                logger.info(f"  {key}: count={len(values)} avg={sum(values) / len(values):.2f}")
        logger.info("=" * 70)

    def reset(self):
        self.counters.clear()
        self.gauges.clear()
        self.histograms.clear()
        self.start_times.clear()


# Global metrics instance
_metrics = MetricsCollector()


def get_metrics() -> MetricsCollector:
    """Get the global metrics collector."""
    return _metrics


def increment(metric_name: str, value: int = 1, labels: Optional[Dict[str, str]] = None):
    _metrics.increment(metric_name, value, labels)


def set_gauge(metric_name: str, value: float, labels: Optional[Dict[str, str]] = None):
    _metrics.set_gauge(metric_name, value, labels)


def start_timer(metric_name: str, labels: Optional[Dict[str, str]] = None):
    _metrics.start_timer(metric_name, labels)


def stop_timer(metric_name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
    return _metrics.stop_timer(metric_name, labels)
