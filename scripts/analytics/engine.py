"""
Callboard — Call Analytics Engine
===================================

Assembles the analytics snapshot for one tenant:

  fetch (Vapi) -> normalize -> filter to tenant + range -> enrich (Supabase)
  -> aggregate + trends -> AnalyticsSnapshot

A failed provider fetch is fatal (ProviderUnavailableError propagates). A
failed analysis chunk only degrades the distributions. An unresolved tenant
returns an empty snapshot; unscoped data is never returned.

Collaborators are injected so tests can substitute fakes:
  provider         - async list_calls(limit, timeout) -> list[dict]
  analysis_store   - lookup_by_call_ids(tenant_id, call_ids, since), optional
  tenant_resolver  - get_owner_id_for_user(user_id), optional
  cache            - get(key) / set(key, value, ttl) / invalidate(key), optional
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, List, Optional

from models.call_models import AnalyticsSnapshot, CallRecord
from scripts.analytics.aggregator import aggregate_metrics
from scripts.analytics.enricher import enrich_calls
from scripts.analytics.normalizer import as_aware, normalize_calls
from scripts.analytics.trends import calculate_trends
from scripts.lib.errors import TenantResolutionError
from scripts.lib.logger import setup_logger
from scripts.lib.snapshot_cache import cache_ttl_for_days

logger = setup_logger("analytics_engine")

RECENT_CALLS_WINDOW_DAYS = 30


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sort_recent(calls: List[CallRecord]) -> List[CallRecord]:
    """Newest first; stable for equal timestamps."""
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(
        calls,
        key=lambda c: as_aware(c.created_at) if c.created_at else epoch,
        reverse=True,
    )


def filter_calls(calls: List[CallRecord], owner_id: str, since: datetime) -> List[CallRecord]:
    """Keep calls owned by owner_id whose timestamp is within range."""
    scoped = []
    for call in calls:
        if not owner_id or call.owner_id != owner_id:
            continue
        ts = call.timestamp
        if ts is None or as_aware(ts) < since:
            continue
        scoped.append(call)
    return scoped


class CallAnalyticsEngine:
    """Computes tenant-scoped call analytics snapshots."""

    def __init__(
        self,
        provider,
        analysis_store=None,
        tenant_resolver=None,
        cache=None,
        fetch_limit: Optional[int] = None,
        fetch_timeout: Optional[float] = None,
        tz: Optional[tzinfo] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.provider = provider
        self.analysis_store = analysis_store
        self.tenant_resolver = tenant_resolver
        self.cache = cache
        self.fetch_limit = fetch_limit
        self.fetch_timeout = fetch_timeout
        self.tz = tz
        self.clock = clock

    @staticmethod
    def cache_key(owner_id: str, tenant_id: str, days: int, limit: int) -> str:
        return f"analytics:{owner_id}:{tenant_id}:{days}:{limit}"

    def empty_snapshot(self, days: int) -> AnalyticsSnapshot:
        return AnalyticsSnapshot(days=days, generated_at=self.clock())

    async def _fetch_scoped(self, owner_id: str, since: datetime) -> List[CallRecord]:
        raw_calls = await self.provider.list_calls(
            limit=self.fetch_limit, timeout=self.fetch_timeout,
        )
        calls = normalize_calls(raw_calls)
        scoped = filter_calls(calls, owner_id, since)
        logger.info(
            "Scoped %d of %d provider calls to owner %s",
            len(scoped), len(calls), owner_id,
        )
        return scoped

    def _resolve_owner(self, user_id: str) -> Optional[str]:
        if self.tenant_resolver is None or not user_id:
            logger.warning("No tenant resolver or user id — returning empty result")
            return None
        try:
            owner_id = self.tenant_resolver.get_owner_id_for_user(user_id)
        except TenantResolutionError as e:
            logger.error("Tenant resolution failed: %s", e)
            return None
        if not owner_id:
            logger.info("User %s has no assistant — returning empty result", user_id)
        return owner_id

    async def compute_analytics(
        self,
        owner_id: str,
        days: int = 30,
        limit: int = 20,
        tenant_id: Optional[str] = None,
        force_refresh: bool = False,
    ) -> AnalyticsSnapshot:
        """
        Compute (or serve from cache) the analytics snapshot for one owner.

        Args:
            owner_id: Assistant id the calls must belong to.
            days: Range length, counted back from now.
            limit: Max entries in recent_calls.
            tenant_id: Owner of the persisted analysis rows (default owner_id).
            force_refresh: Drop any cached snapshot before computing.

        Raises:
            ProviderUnavailableError: The call provider fetch failed.
        """
        if not owner_id:
            return self.empty_snapshot(days)

        tenant_id = tenant_id or owner_id
        key = self.cache_key(owner_id, tenant_id, days, limit)
        if self.cache is not None:
            if force_refresh:
                self.cache.invalidate(key)
            else:
                cached = self.cache.get(key)
                if cached is not None:
                    logger.debug("Cache hit for %s", key)
                    return cached.model_copy(deep=True)

        now = self.clock()
        since = now - timedelta(days=days)

        calls = await self._fetch_scoped(owner_id, since)
        enrichment = enrich_calls(calls, tenant_id, self.analysis_store, since)
        enriched = enrichment.calls

        snapshot = AnalyticsSnapshot(
            metrics=aggregate_metrics(
                enriched,
                analyses=enrichment.analyses,
                lookup_available=enrichment.lookup_available,
                tenant_id=tenant_id,
                since=since,
                tz=self.tz,
            ),
            recent_calls=sort_recent(enriched)[:limit],
            trends=calculate_trends(enriched, days, now=now),
            days=days,
            generated_at=now,
        )

        if self.cache is not None:
            self.cache.set(key, snapshot.model_copy(deep=True), cache_ttl_for_days(days))

        logger.info(
            "Computed analytics for owner %s: %d calls over %d days",
            owner_id, snapshot.metrics.total_calls, days,
        )
        return snapshot

    async def compute_for_user(
        self, user_id: str, days: int = 30, limit: int = 20, force_refresh: bool = False,
    ) -> AnalyticsSnapshot:
        """Resolve the user's tenant, then compute; empty snapshot if unresolved."""
        owner_id = self._resolve_owner(user_id)
        if not owner_id:
            return self.empty_snapshot(days)
        return await self.compute_analytics(
            owner_id, days=days, limit=limit, tenant_id=user_id,
            force_refresh=force_refresh,
        )

    async def recent_calls_for_user(self, user_id: str, limit: int = 20) -> List[CallRecord]:
        """Newest calls of the user's tenant, without aggregation or enrichment."""
        owner_id = self._resolve_owner(user_id)
        if not owner_id:
            return []
        since = self.clock() - timedelta(days=RECENT_CALLS_WINDOW_DAYS)
        calls = await self._fetch_scoped(owner_id, since)
        return sort_recent(calls)[:limit]
