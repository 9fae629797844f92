"""
Callboard — Record Normalizer
===============================

Maps raw Vapi call objects into CallRecord. Every field falls back to a safe
default, so normalization never raises.

Functions:
  normalize_call()   - One raw call -> CallRecord
  normalize_calls()  - List of raw calls -> list of CallRecord
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, List, Optional

from models.call_models import LEAD_QUALITIES, SENTIMENTS, CallAnalysis, CallRecord


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def as_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_ts(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp to a timezone-aware datetime."""
    if isinstance(value, datetime):
        return as_aware(value)
    if not isinstance(value, str) or not value:
        return None
    try:
        return as_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return None


def _safe_float(val: Any, default: float = 0.0) -> float:
    """Safely convert a value to a finite float."""
    if val is None or isinstance(val, bool):
        return default
    try:
        result = float(val)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _first_number(*candidates: dict) -> Optional[str]:
    for candidate in candidates:
        number = candidate.get("number")
        if number:
            return str(number)
    return None


def _duration_seconds(started_at: Optional[datetime], ended_at: Optional[datetime]) -> int:
    if started_at and ended_at:
        return max(0, _round_half_up((ended_at - started_at).total_seconds()))
    return 0


def _transcript(messages: Any) -> Optional[str]:
    if not isinstance(messages, list):
        return None
    lines = []
    for msg in messages:
        if not isinstance(msg, dict):
            continue
        text = msg.get("message") or msg.get("content")
        if text is None:
            continue
        lines.append(f"{msg.get('role', 'unknown')}: {text}")
    return "\n".join(lines) or None


def _label(value: Any, allowed: tuple) -> Optional[str]:
    """Return the lower-cased label when it is one of the known values."""
    if not isinstance(value, str):
        return None
    label = value.strip().lower()
    return label if label in allowed else None


def normalize_call(raw: Any) -> CallRecord:
    """
    Normalize one raw provider call.

    Duration comes from endedAt - startedAt when both are present, else 0.
    created_at is createdAt, else startedAt, else None; undated calls are
    dropped by the range filter. A missing endedReason becomes
    "customer-ended-call" for calls with duration, "no-answer" otherwise.
    """
    raw = _as_dict(raw)
    customer = _as_dict(raw.get("customer"))
    analysis = _as_dict(raw.get("analysis"))
    structured = _as_dict(analysis.get("structuredData"))

    started_at = _parse_ts(raw.get("startedAt"))
    ended_at = _parse_ts(raw.get("endedAt"))
    created_at = _parse_ts(raw.get("createdAt")) or started_at
    duration = _duration_seconds(started_at, ended_at)

    ended_reason = raw.get("endedReason")
    if not isinstance(ended_reason, str) or not ended_reason:
        ended_reason = "customer-ended-call" if duration > 0 else "no-answer"

    status = raw.get("status")
    owner_id = raw.get("assistantId") or _as_dict(raw.get("assistant")).get("id")

    return CallRecord(
        id=str(raw.get("id") or ""),
        owner_id=str(owner_id) if owner_id else None,
        phone_number=_first_number(
            customer,
            _as_dict(raw.get("destination")),
            _as_dict(raw.get("phoneNumber")),
        ),
        caller_name=customer.get("name"),
        created_at=created_at,
        started_at=started_at,
        ended_at=ended_at,
        duration_seconds=duration,
        status=status if isinstance(status, str) and status else "unknown",
        ended_reason=ended_reason,
        cost=_safe_float(raw.get("cost")),
        transcript=_transcript(raw.get("messages")),
        summary=analysis.get("summary") or raw.get("summary"),
        analysis=CallAnalysis(
            sentiment=_label(structured.get("sentiment"), SENTIMENTS),
            lead_quality=_label(structured.get("leadQuality"), LEAD_QUALITIES),
            success_evaluation=analysis.get("successEvaluation"),
        ),
    )


def normalize_calls(raws: List[Any]) -> List[CallRecord]:
    return [normalize_call(raw) for raw in raws or []]
