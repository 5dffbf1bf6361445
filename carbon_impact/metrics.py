# -*- coding: utf-8 -*-
"""
Prometheus Metrics - Carbon Impact Engine

Prometheus metrics for the carbon impact service. All metric names use
the ``gl_ci_`` prefix.

Metrics:
    1. gl_ci_calculations_total            (Counter,   labels: calculator, status)
    2. gl_ci_tons_total                    (Counter,   labels: calculator, gas)
    3. gl_ci_efficiency_lookups_total      (Counter,   labels: table, outcome)
    4. gl_ci_validation_failures_total     (Counter,   labels: calculator, reason)
    5. gl_ci_persistence_failures_total    (Counter,   labels: collection)
    6. gl_ci_calculation_duration_seconds  (Histogram, labels: operation)

Label Values Reference:
    calculator:
        sink, existing_sink, renewable, ccs, mcs.
    status:
        completed, failed.
    gas:
        CO2, CH4, CO2e.
    table:
        ccs, mcs.
    outcome:
        matched, defaulted.
    reason:
        missing, non_numeric, non_positive, non_finite, not_found.

Each CarbonImpactService owns a MetricsCollector built from its own
``enable_metrics`` flag; a disabled collector records nothing.

Example:
    >>> from carbon_impact.metrics import MetricsCollector
    >>> metrics = MetricsCollector(enabled=True)
    >>> metrics.record_calculation("ccs", "completed")
    >>> metrics.record_tons("ccs", "CO2", 850.0)

Author: Carbon Impact Team
Date: October 2026
Status: Production Ready
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from prometheus_client import Counter, Histogram

from carbon_impact.config import get_config

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# 1. Calculation requests by calculator and completion status
ci_calculations_total = Counter(
    "gl_ci_calculations_total",
    "Total carbon impact calculations performed",
    labelnames=["calculator", "status"],
)

# 2. Tons captured, sequestered or avoided per year
ci_tons_total = Counter(
    "gl_ci_tons_total",
    "Cumulative tons captured, sequestered or avoided by calculator and gas",
    labelnames=["calculator", "gas"],
)

# 3. Capture efficiency table lookups
ci_efficiency_lookups_total = Counter(
    "gl_ci_efficiency_lookups_total",
    "Total capture efficiency lookups by table and outcome",
    labelnames=["table", "outcome"],
)

# 4. Rejected requests
ci_validation_failures_total = Counter(
    "gl_ci_validation_failures_total",
    "Total rejected calculation requests by calculator and reason",
    labelnames=["calculator", "reason"],
)

# 5. Store write failures
ci_persistence_failures_total = Counter(
    "gl_ci_persistence_failures_total",
    "Total failed calculation store writes by collection",
    labelnames=["collection"],
)

# 6. Calculation latency
ci_calculation_duration_seconds = Histogram(
    "gl_ci_calculation_duration_seconds",
    "Duration of carbon impact operations in seconds",
    labelnames=["operation"],
    buckets=(
        0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025,
        0.05, 0.1, 0.25, 0.5, 1.0, 2.5,
    ),
)


# ---------------------------------------------------------------------------
# MetricsCollector
# ---------------------------------------------------------------------------


class MetricsCollector:
    """Facade for recording carbon impact Prometheus metrics.

    Args:
        enabled: Whether to record anything. Defaults to the process-wide
            ``enable_metrics`` setting.
    """

    def __init__(self, enabled: Optional[bool] = None) -> None:
        self.enabled = get_config().enable_metrics if enabled is None else enabled

    def record_calculation(self, calculator: str, status: str) -> None:
        """Record a calculation outcome.

        Args:
            calculator: Calculator name (sink, existing_sink, renewable,
                ccs, mcs).
            status: ``completed`` or ``failed``.
        """
        if not self.enabled:
            return
        ci_calculations_total.labels(
            calculator=calculator,
            status=status,
        ).inc()

    def record_tons(self, calculator: str, gas: str, tons: float) -> None:
        """Add ``tons`` to the cumulative tonnage counter.

        Non-finite and non-positive amounts are ignored; a counter can
        only grow.
        """
        if not self.enabled:
            return
        if not math.isfinite(tons) or tons <= 0:
            return
        ci_tons_total.labels(calculator=calculator, gas=gas).inc(tons)

    def record_efficiency_lookup(self, table: str, matched: bool) -> None:
        if not self.enabled:
            return
        ci_efficiency_lookups_total.labels(
            table=table,
            outcome="matched" if matched else "defaulted",
        ).inc()

    def record_validation_failure(self, calculator: str, reason: str) -> None:
        if not self.enabled:
            return
        ci_validation_failures_total.labels(
            calculator=calculator,
            reason=reason,
        ).inc()

    def record_persistence_failure(self, collection: str) -> None:
        if not self.enabled:
            return
        ci_persistence_failures_total.labels(collection=collection).inc()

    def observe_duration(self, operation: str, seconds: float) -> None:
        """Record the duration of an operation.

        Args:
            operation: Operation name (e.g. ``create_sink``, ``ccs``).
            seconds: Wall-clock duration in seconds.
        """
        if not self.enabled:
            return
        ci_calculation_duration_seconds.labels(operation=operation).observe(
            seconds
        )


__all__ = [
    "ci_calculations_total",
    "ci_tons_total",
    "ci_efficiency_lookups_total",
    "ci_validation_failures_total",
    "ci_persistence_failures_total",
    "ci_calculation_duration_seconds",
    "MetricsCollector",
]
