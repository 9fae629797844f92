"""
Callboard — Outcome Classifier
================================

Decides whether a call succeeded. The decision is an ordered cascade of
steps; each step returns True (success), False (failure) or None
(inconclusive). The first decisive step wins and later steps are never
consulted.

Cascade:
  1. AI success evaluation  (analysis.success_evaluation)
  2. Ended reason
  3. Provider status        ("ended" is not a success signal)
  4. Duration fallback      (>= 5 seconds, always decisive)

Functions:
  classify_call()       - CallRecord -> ClassificationResult
  is_successful_call()  - CallRecord -> bool
"""
from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from models.call_models import CallRecord, ClassificationResult, ClassificationTier
from scripts.lib.logger import setup_logger

logger = setup_logger("classifier")

EVALUATION_SUCCESS = frozenset({"true", "pass", "successful"})
EVALUATION_FAILURE = frozenset({"false", "fail", "failed"})
EVALUATION_SCORE_THRESHOLD = 7  # 1-10 scale

ENDED_REASON_FAILURE = frozenset({
    "silence-timed-out",
    "silence timed out",
    "assistant-error",
    "no-answer",
    "customer-did-not-give-microphone-permission",
})
ENDED_REASON_SUCCESS = frozenset({"customer-ended-call", "assistant-ended-call"})

STATUS_FAILURE = frozenset({"failed", "busy", "no-answer", "cancelled", "timeout"})
STATUS_SUCCESS = frozenset({"completed", "answered"})

MIN_SUCCESS_DURATION_SECONDS = 5


def _from_ai_evaluation(call: CallRecord) -> Optional[bool]:
    evaluation = call.analysis.success_evaluation
    if evaluation is None:
        return None
    # bool before number: bool is an int subclass
    if isinstance(evaluation, bool):
        return evaluation
    if isinstance(evaluation, str):
        value = evaluation.lower()
        if value in EVALUATION_SUCCESS:
            return True
        if value in EVALUATION_FAILURE:
            return False
        return None
    if isinstance(evaluation, (int, float)):
        return evaluation >= EVALUATION_SCORE_THRESHOLD
    return None


def _from_ended_reason(call: CallRecord) -> Optional[bool]:
    if not call.ended_reason:
        return None
    reason = call.ended_reason.lower()
    if reason in ENDED_REASON_FAILURE:
        return False
    if reason in ENDED_REASON_SUCCESS:
        return True
    return None


def _from_status(call: CallRecord) -> Optional[bool]:
    if not call.status:
        return None
    status = call.status.lower()
    if status in STATUS_FAILURE:
        return False
    if status in STATUS_SUCCESS:
        return True
    return None


def _from_duration(call: CallRecord) -> Optional[bool]:
    return call.duration_seconds >= MIN_SUCCESS_DURATION_SECONDS


CLASSIFICATION_STEPS: List[Tuple[ClassificationTier, Callable[[CallRecord], Optional[bool]]]] = [
    (ClassificationTier.AI_EVALUATION, _from_ai_evaluation),
    (ClassificationTier.ENDED_REASON, _from_ended_reason),
    (ClassificationTier.STATUS, _from_status),
    (ClassificationTier.DURATION, _from_duration),
]


def classify_call(call: CallRecord) -> ClassificationResult:
    """Run the cascade and report the outcome with the tier that decided it."""
    for tier, step in CLASSIFICATION_STEPS:
        decision = step(call)
        if decision is not None:
            logger.debug("Call %s classified %s by %s", call.id,
                         "success" if decision else "failure", tier.value)
            return ClassificationResult(success=decision, tier=tier)
    # unreachable: the duration step always decides
    return ClassificationResult(success=False, tier=ClassificationTier.DURATION)


def is_successful_call(call: CallRecord) -> bool:
    return classify_call(call).success
