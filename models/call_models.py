"""
Callboard — Call Analytics Pydantic Models
============================================

Normalized call records, classification results, and the analytics
snapshot returned to the dashboard.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


SENTIMENTS = ("positive", "neutral", "negative")
LEAD_QUALITIES = ("hot", "warm", "cold")
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


# ─── Enums ──────────────────────────────────────────────────

class ClassificationTier(str, Enum):
    """Cascade stage that decided a call outcome."""
    AI_EVALUATION = "ai_evaluation"
    ENDED_REASON = "ended_reason"
    STATUS = "status"
    DURATION = "duration"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class DistributionSource(str, Enum):
    """Where a sentiment / lead quality distribution came from."""
    REAL = "real"
    ESTIMATED = "estimated"
    UNAVAILABLE = "unavailable"


# ─── Call Models ────────────────────────────────────────────

class CallAnalysis(BaseModel):
    """AI analysis attached to a call, from the provider or the analysis store."""
    sentiment: Optional[str] = None
    lead_quality: Optional[str] = None
    success_evaluation: Any = None


class CallRecord(BaseModel):
    """A provider call normalized into the dashboard's canonical shape."""
    id: str = ""
    owner_id: Optional[str] = None
    phone_number: Optional[str] = None
    caller_name: Optional[str] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    duration_seconds: int = Field(0, ge=0)
    status: Optional[str] = None
    ended_reason: Optional[str] = None
    cost: float = 0.0
    transcript: Optional[str] = None
    summary: Optional[str] = None
    analysis: CallAnalysis = Field(default_factory=CallAnalysis)

    @property
    def timestamp(self) -> Optional[datetime]:
        """Time the call is bucketed under: created_at, else started_at."""
        return self.created_at or self.started_at


class ClassificationResult(BaseModel):
    success: bool
    tier: ClassificationTier


class AnalysisRecord(BaseModel):
    """A persisted analysis row, written by the external analysis process."""
    call_id: str
    tenant_id: Optional[str] = None
    sentiment: Optional[str] = None
    lead_quality: Optional[str] = None
    analyzed_at: Optional[datetime] = None


# ─── Snapshot Models ────────────────────────────────────────

class HourlyCount(BaseModel):
    hour: int
    count: int = 0


class DailyCount(BaseModel):
    day: str
    count: int = 0


class SentimentDistribution(BaseModel):
    positive: int = 0
    neutral: int = 0
    negative: int = 0
    source: DistributionSource = DistributionSource.UNAVAILABLE


class LeadQualityDistribution(BaseModel):
    hot: int = 0
    warm: int = 0
    cold: int = 0
    source: DistributionSource = DistributionSource.UNAVAILABLE


class MetricsSnapshot(BaseModel):
    total_calls: int = 0
    answered_calls: int = 0
    missed_calls: int = 0
    avg_duration: float = 0.0
    total_cost: float = 0.0
    avg_cost: float = 0.0
    calls_by_hour: List[HourlyCount] = Field(
        default_factory=lambda: [HourlyCount(hour=h) for h in range(24)]
    )
    calls_by_day: List[DailyCount] = Field(
        default_factory=lambda: [DailyCount(day=d) for d in DAY_NAMES]
    )
    sentiment_distribution: SentimentDistribution = Field(default_factory=SentimentDistribution)
    lead_quality_distribution: LeadQualityDistribution = Field(default_factory=LeadQualityDistribution)


class TrendSnapshot(BaseModel):
    call_volume_trend: Trend = Trend.STABLE
    avg_duration_trend: Trend = Trend.STABLE
    cost_trend: Trend = Trend.STABLE


class AnalyticsSnapshot(BaseModel):
    """Everything the analytics dashboard renders for one tenant and range."""
    metrics: MetricsSnapshot = Field(default_factory=MetricsSnapshot)
    recent_calls: List[CallRecord] = Field(default_factory=list)
    trends: TrendSnapshot = Field(default_factory=TrendSnapshot)
    days: int = 30
    generated_at: Optional[datetime] = None


class RecentCallsResponse(BaseModel):
    results: List[CallRecord] = Field(default_factory=list)
    count: int = 0
