"""
Callboard — Trend Calculator
==============================

Splits a call set at the middle of the requested range and compares the
recent half against the older half. Partitions and classifications are
derived here independently of the aggregator.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from models.call_models import CallRecord, Trend, TrendSnapshot
from scripts.analytics.classifier import is_successful_call
from scripts.analytics.normalizer import as_aware


def compare(recent: float, older: float) -> Trend:
    if recent > older:
        return Trend.UP
    if recent < older:
        return Trend.DOWN
    return Trend.STABLE


def _avg_success_duration(calls: List[CallRecord]) -> float:
    durations = [c.duration_seconds for c in calls if is_successful_call(c)]
    return sum(durations) / len(durations) if durations else 0.0


def calculate_trends(
    calls: List[CallRecord], days: int, now: Optional[datetime] = None,
) -> TrendSnapshot:
    """Volume, successful-call duration, and cost trends for the range."""
    if not calls:
        return TrendSnapshot()

    now = as_aware(now) if now else datetime.now(timezone.utc)
    midpoint = now - timedelta(days=days // 2)

    recent: List[CallRecord] = []
    older: List[CallRecord] = []
    for call in calls:
        ts = call.timestamp
        if ts is not None and as_aware(ts) >= midpoint:
            recent.append(call)
        else:
            older.append(call)

    return TrendSnapshot(
        call_volume_trend=compare(len(recent), len(older)),
        avg_duration_trend=compare(
            _avg_success_duration(recent), _avg_success_duration(older),
        ),
        cost_trend=compare(
            sum(c.cost or 0.0 for c in recent),
            sum(c.cost or 0.0 for c in older),
        ),
    )
