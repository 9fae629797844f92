"""Tests for the call outcome classifier cascade."""

import pytest

from models.call_models import CallAnalysis, CallRecord, ClassificationTier
from scripts.analytics.classifier import CLASSIFICATION_STEPS, classify_call, is_successful_call


def make_call(evaluation=None, ended_reason=None, status=None, duration=0):
    return CallRecord(
        id="call_1",
        status=status,
        ended_reason=ended_reason,
        duration_seconds=duration,
        analysis=CallAnalysis(success_evaluation=evaluation),
    )


class TestCascadeOrder:
    def test_steps_are_in_priority_order(self):
        assert [tier for tier, _ in CLASSIFICATION_STEPS] == [
            ClassificationTier.AI_EVALUATION,
            ClassificationTier.ENDED_REASON,
            ClassificationTier.STATUS,
            ClassificationTier.DURATION,
        ]

    def test_ai_evaluation_beats_failing_ended_reason(self):
        result = classify_call(make_call(evaluation=True, ended_reason="no-answer"))
        assert result.success is True
        assert result.tier == ClassificationTier.AI_EVALUATION

    def test_ended_reason_beats_failing_status(self):
        result = classify_call(make_call(ended_reason="customer-ended-call", status="failed"))
        assert result.success is True
        assert result.tier == ClassificationTier.ENDED_REASON

    def test_ended_status_falls_through_to_duration(self):
        result = classify_call(make_call(status="ended", duration=3))
        assert result.tier == ClassificationTier.DURATION
        assert result.success is False

        assert classify_call(make_call(status="ended", duration=60)).success is True

    def test_is_deterministic(self):
        call = make_call(evaluation="PASS", ended_reason="no-answer", duration=1)
        assert [classify_call(call) for _ in range(3)] == [classify_call(call)] * 3


class TestAIEvaluation:
    @pytest.mark.parametrize("value", ["true", "Pass", "SUCCESSFUL"])
    def test_success_strings(self, value):
        result = classify_call(make_call(evaluation=value, ended_reason="no-answer"))
        assert result.success is True
        assert result.tier == ClassificationTier.AI_EVALUATION

    @pytest.mark.parametrize("value", ["false", "FAIL", "Failed"])
    def test_failure_strings(self, value):
        result = classify_call(make_call(evaluation=value, ended_reason="customer-ended-call"))
        assert result.success is False
        assert result.tier == ClassificationTier.AI_EVALUATION

    def test_unknown_string_is_inconclusive(self):
        result = classify_call(make_call(evaluation="maybe", ended_reason="assistant-ended-call"))
        assert result.tier == ClassificationTier.ENDED_REASON
        assert result.success is True

    def test_numeric_scores(self):
        assert classify_call(make_call(evaluation=7)).success is True
        assert classify_call(make_call(evaluation=9.5)).success is True
        low = classify_call(make_call(evaluation=6.9, ended_reason="customer-ended-call"))
        assert low.success is False
        assert low.tier == ClassificationTier.AI_EVALUATION

    def test_boolean_false_is_decisive(self):
        result = classify_call(make_call(evaluation=False, duration=120))
        assert result.success is False
        assert result.tier == ClassificationTier.AI_EVALUATION


class TestEndedReasonAndStatus:
    @pytest.mark.parametrize("reason", [
        "silence-timed-out",
        "Silence Timed Out",
        "assistant-error",
        "no-answer",
        "customer-did-not-give-microphone-permission",
    ])
    def test_failure_reasons(self, reason):
        result = classify_call(make_call(ended_reason=reason, status="completed", duration=300))
        assert result.success is False
        assert result.tier == ClassificationTier.ENDED_REASON

    def test_unknown_reason_falls_to_status(self):
        result = classify_call(make_call(ended_reason="pipeline-error-xyz", status="busy", duration=300))
        assert result.success is False
        assert result.tier == ClassificationTier.STATUS

    @pytest.mark.parametrize("status", ["failed", "BUSY", "no-answer", "cancelled", "timeout"])
    def test_failure_statuses(self, status):
        assert classify_call(make_call(status=status, duration=300)).success is False

    @pytest.mark.parametrize("status", ["completed", "Answered"])
    def test_success_statuses(self, status):
        result = classify_call(make_call(status=status, duration=0))
        assert result.success is True
        assert result.tier == ClassificationTier.STATUS


class TestDurationFallback:
    def test_boundary(self):
        assert is_successful_call(make_call(duration=4)) is False
        assert is_successful_call(make_call(duration=5)) is True

    def test_everything_missing(self):
        result = classify_call(CallRecord())
        assert result.success is False
        assert result.tier == ClassificationTier.DURATION
