"""
Read-only Supabase access for the analytics engine.

  SupabaseAnalysisStore   - Batched lookups against call_analysis
  SupabaseTenantResolver  - user id -> Vapi assistant id (user_settings)

Both raise on failure; the engine decides how to degrade.

Usage:
    from scripts.lib.call_analysis_store import SupabaseAnalysisStore

    store = SupabaseAnalysisStore()
    rows = store.lookup_by_call_ids(user_id, ["call_1", "call_2"], since)
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from models.call_models import LEAD_QUALITIES, SENTIMENTS, AnalysisRecord
from scripts.lib.errors import AnalysisLookupError, TenantResolutionError
from scripts.lib.logger import setup_logger
from scripts.lib.supabase_client import get_client

logger = setup_logger("call_analysis_store")

# Supabase `in` filters are sent in the URL; keep batches small
MAX_LOOKUP_BATCH = 100


def _row_to_record(row: dict) -> AnalysisRecord:
    sentiment = row.get("sentiment")
    lead_quality = row.get("lead_quality")
    return AnalysisRecord(
        call_id=str(row.get("vapi_call_id")),
        tenant_id=row.get("user_id"),
        sentiment=sentiment if sentiment in SENTIMENTS else None,
        lead_quality=lead_quality if lead_quality in LEAD_QUALITIES else None,
        analyzed_at=row.get("analyzed_at"),
    )


class SupabaseAnalysisStore:
    """Persisted call analysis, written by the analysis process."""

    table = "call_analysis"

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_client()
        return self._client

    def lookup_by_call_ids(
        self, tenant_id: str, call_ids: List[str], since: datetime,
    ) -> List[AnalysisRecord]:
        """
        Fetch analysis rows for up to MAX_LOOKUP_BATCH call ids.

        Raises:
            AnalysisLookupError: Oversized batch or query failure.
        """
        if len(call_ids) > MAX_LOOKUP_BATCH:
            raise AnalysisLookupError(
                f"Batch of {len(call_ids)} exceeds {MAX_LOOKUP_BATCH}",
                batch_size=len(call_ids),
            )
        if not call_ids:
            return []
        try:
            result = (
                self.client.table(self.table)
                .select("vapi_call_id, user_id, sentiment, lead_quality, analyzed_at")
                .eq("user_id", tenant_id)
                .in_("vapi_call_id", call_ids)
                .gte("analyzed_at", since.isoformat())
                .execute()
            )
        except Exception as e:
            raise AnalysisLookupError(
                f"call_analysis lookup failed: {e}", batch_size=len(call_ids),
            ) from e
        return [_row_to_record(row) for row in (result.data or [])]


class SupabaseTenantResolver:
    """Maps a dashboard user to the Vapi assistant that owns their calls."""

    table = "user_settings"

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_client()
        return self._client

    def get_owner_id_for_user(self, user_id: str) -> Optional[str]:
        """
        Returns:
            The assistant id, or None when the user has none.

        Raises:
            TenantResolutionError: The lookup itself failed.
        """
        try:
            result = (
                self.client.table(self.table)
                .select("vapi_assistant_id")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise TenantResolutionError(
                f"user_settings lookup failed: {e}", user_id=user_id,
            ) from e
        if not result.data:
            return None
        return result.data[0].get("vapi_assistant_id") or None
