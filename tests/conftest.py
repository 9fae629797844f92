"""Shared fakes for the analytics tests."""

from datetime import datetime, timedelta, timezone

import pytest

from models.call_models import AnalysisRecord
from scripts.lib.circuit_breaker import CircuitBreaker
from scripts.lib.errors import AnalysisLookupError, ProviderUnavailableError

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


def raw_call(call_id, owner="asst_1", created=None, duration=30, **extra):
    """Build a raw Vapi call payload."""
    created = created or NOW - timedelta(hours=1)
    call = {
        "id": call_id,
        "assistantId": owner,
        "createdAt": iso(created),
        "startedAt": iso(created),
        "endedAt": iso(created + timedelta(seconds=duration)),
        "status": "ended",
        "cost": 0.5,
    }
    call.update(extra)
    return call


class FakeProvider:
    def __init__(self, calls=None, error=None):
        self.calls = calls or []
        self.error = error
        self.requests = 0
        self.is_configured = True

    async def list_calls(self, limit=None, timeout=None):
        self.requests += 1
        if self.error:
            raise self.error
        return list(self.calls)


class FakeAnalysisStore:
    """Records each lookup batch; optionally fails chosen batch numbers."""

    def __init__(self, rows=None, fail_batches=(), fail_all=False):
        self.rows = {r.call_id: r for r in (rows or [])}
        self.fail_batches = set(fail_batches)
        self.fail_all = fail_all
        self.batches = []

    def lookup_by_call_ids(self, tenant_id, call_ids, since):
        self.batches.append(list(call_ids))
        if self.fail_all or len(self.batches) in self.fail_batches:
            raise AnalysisLookupError("boom", batch_size=len(call_ids))
        return [self.rows[cid] for cid in call_ids if cid in self.rows]


class FakeTenantResolver:
    def __init__(self, mapping=None, error=None):
        self.mapping = mapping or {}
        self.error = error

    def get_owner_id_for_user(self, user_id):
        if self.error:
            raise self.error
        return self.mapping.get(user_id)


def analysis(call_id, sentiment="positive", lead="hot", tenant="user_1", analyzed_at=None):
    return AnalysisRecord(
        call_id=call_id,
        tenant_id=tenant,
        sentiment=sentiment,
        lead_quality=lead,
        analyzed_at=analyzed_at or NOW - timedelta(hours=1),
    )


@pytest.fixture(autouse=True)
def reset_breakers():
    CircuitBreaker.reset_all()
    yield
    CircuitBreaker.reset_all()


@pytest.fixture
def provider_down():
    return FakeProvider(error=ProviderUnavailableError("down", status_code=503))
