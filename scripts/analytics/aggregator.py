"""
Callboard — Metrics Aggregator
================================

Computes the dashboard metrics over a call set that the caller has already
scoped to one tenant and date window.

  answered / missed     - Outcome classifier
  avg_duration          - Successful calls only
  total_cost / avg_cost - Every call, regardless of outcome
  calls_by_hour / _day  - created_at (fallback started_at) in local time
  sentiment / lead      - Persisted analysis when available, else fixed
                          ratio estimates of answered calls

Functions:
  aggregate_metrics()         - Full MetricsSnapshot
  sentiment_distribution()    - Real or estimated sentiment counts
  lead_quality_distribution() - Real or estimated lead quality counts
"""
from __future__ import annotations

import math
from collections import Counter
from datetime import datetime, tzinfo
from typing import Dict, List, Optional

from models.call_models import (
    DAY_NAMES,
    AnalysisRecord,
    CallRecord,
    DailyCount,
    DistributionSource,
    HourlyCount,
    LeadQualityDistribution,
    MetricsSnapshot,
    SentimentDistribution,
)
from scripts.analytics.classifier import is_successful_call
from scripts.analytics.normalizer import as_aware
from scripts.lib.logger import setup_logger

logger = setup_logger("aggregator")

# Share of answered calls assumed per label when no analysis data exists
SENTIMENT_FALLBACK_RATIOS = {"positive": 0.6, "neutral": 0.3, "negative": 0.1}
LEAD_QUALITY_FALLBACK_RATIOS = {"hot": 0.2, "warm": 0.5, "cold": 0.3}


def _estimate(answered_calls: int, ratios: Dict[str, float]) -> Dict[str, int]:
    # floored, never reconciled against the total
    return {label: math.floor(answered_calls * ratio) for label, ratio in ratios.items()}


def _matching_analyses(
    calls: List[CallRecord],
    analyses: Dict[str, AnalysisRecord],
    tenant_id: Optional[str],
    since: Optional[datetime],
) -> List[AnalysisRecord]:
    """Rows for this tenant, analyzed within range, for calls still in the set."""
    call_ids = {c.id for c in calls}
    rows = []
    for row in analyses.values():
        if row.call_id not in call_ids:
            continue
        if tenant_id and row.tenant_id != tenant_id:
            continue
        if since is not None:
            if row.analyzed_at is None or as_aware(row.analyzed_at) < since:
                continue
        rows.append(row)
    return rows


def sentiment_distribution(
    rows: List[AnalysisRecord], lookup_available: bool, answered_calls: int,
) -> SentimentDistribution:
    if lookup_available and rows:
        counts = Counter(r.sentiment for r in rows)
        return SentimentDistribution(
            positive=counts["positive"],
            neutral=counts["neutral"],
            negative=counts["negative"],
            source=DistributionSource.REAL,
        )
    if answered_calls == 0:
        return SentimentDistribution(source=DistributionSource.UNAVAILABLE)
    return SentimentDistribution(
        **_estimate(answered_calls, SENTIMENT_FALLBACK_RATIOS),
        source=DistributionSource.ESTIMATED,
    )


def lead_quality_distribution(
    rows: List[AnalysisRecord], lookup_available: bool, answered_calls: int,
) -> LeadQualityDistribution:
    if lookup_available and rows:
        counts = Counter(r.lead_quality for r in rows)
        return LeadQualityDistribution(
            hot=counts["hot"],
            warm=counts["warm"],
            cold=counts["cold"],
            source=DistributionSource.REAL,
        )
    if answered_calls == 0:
        return LeadQualityDistribution(source=DistributionSource.UNAVAILABLE)
    return LeadQualityDistribution(
        **_estimate(answered_calls, LEAD_QUALITY_FALLBACK_RATIOS),
        source=DistributionSource.ESTIMATED,
    )


def aggregate_metrics(
    calls: List[CallRecord],
    analyses: Optional[Dict[str, AnalysisRecord]] = None,
    lookup_available: bool = False,
    tenant_id: Optional[str] = None,
    since: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> MetricsSnapshot:
    """
    Aggregate metrics over a scoped, enriched call set.

    Args:
        calls: Normalized + enriched calls.
        analyses: call_id -> persisted analysis row, from the enricher.
        lookup_available: False when the analysis store was missing or every
            lookup chunk failed; forces the estimated distributions.
        tenant_id: Tenant the analysis rows must belong to.
        since: Start of the requested range; older analysis rows are ignored.
        tz: Timezone for the hour / weekday histograms (None = server local).

    Returns:
        MetricsSnapshot.
    """
    total_calls = len(calls)
    successful = [c for c in calls if is_successful_call(c)]
    answered_calls = len(successful)

    success_duration = sum(c.duration_seconds for c in successful)
    total_cost = sum(c.cost or 0.0 for c in calls)

    by_hour: Counter = Counter()
    by_day: Counter = Counter()
    for call in calls:
        ts = call.timestamp
        if ts is None:
            continue
        local = as_aware(ts).astimezone(tz)
        by_hour[local.hour] += 1
        # Python weeks start on Monday; shift to Sunday-first
        by_day[DAY_NAMES[(local.weekday() + 1) % 7]] += 1

    if since is not None:
        since = as_aware(since)
    rows = _matching_analyses(calls, analyses or {}, tenant_id, since)

    snapshot = MetricsSnapshot(
        total_calls=total_calls,
        answered_calls=answered_calls,
        missed_calls=total_calls - answered_calls,
        avg_duration=success_duration / answered_calls if answered_calls else 0.0,
        total_cost=total_cost,
        avg_cost=total_cost / total_calls if total_calls else 0.0,
        calls_by_hour=[HourlyCount(hour=h, count=by_hour[h]) for h in range(24)],
        calls_by_day=[DailyCount(day=d, count=by_day[d]) for d in DAY_NAMES],
        sentiment_distribution=sentiment_distribution(rows, lookup_available, answered_calls),
        lead_quality_distribution=lead_quality_distribution(rows, lookup_available, answered_calls),
    )

    logger.info(
        "Aggregated %d calls: %d answered, sentiment source=%s",
        total_calls, answered_calls, snapshot.sentiment_distribution.source.value,
    )
    return snapshot
