"""
Callboard — Analysis Enricher
===============================

Merges persisted sentiment / lead quality (written by the analysis process
into Supabase) into normalized call records.

Lookups are batched: call ids are split into chunks of at most
ANALYSIS_BATCH_SIZE and each chunk is one store lookup. A failed chunk is
logged and skipped; the remaining chunks still contribute.

Functions:
  chunk_ids()     - Split ids into lookup batches
  merge_analysis() - Apply one persisted row to one call (returns a copy)
  enrich_calls()  - Full batched enrichment -> EnrichmentResult
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from models.call_models import AnalysisRecord, CallRecord
from scripts.lib.logger import setup_logger

logger = setup_logger("enricher")

ANALYSIS_BATCH_SIZE = 100


class EnrichmentResult(BaseModel):
    calls: List[CallRecord]
    analyses: Dict[str, AnalysisRecord] = Field(default_factory=dict)
    chunks_total: int = 0
    chunks_failed: int = 0
    store_configured: bool = True

    @property
    def lookup_available(self) -> bool:
        """A store exists and not every chunk failed."""
        if not self.store_configured:
            return False
        return self.chunks_total == 0 or self.chunks_failed < self.chunks_total


def chunk_ids(call_ids: List[str], size: int = ANALYSIS_BATCH_SIZE) -> List[List[str]]:
    """Deduplicate ids (keeping first-seen order) and split into batches."""
    unique = list(dict.fromkeys(cid for cid in call_ids if cid))
    return [unique[i:i + size] for i in range(0, len(unique), size)]


def merge_analysis(call: CallRecord, persisted: Optional[AnalysisRecord]) -> CallRecord:
    """Persisted values win per field; absent ones keep the provider value."""
    analysis = call.analysis.model_copy(update={
        "sentiment": (persisted.sentiment if persisted else None) or call.analysis.sentiment,
        "lead_quality": (persisted.lead_quality if persisted else None) or call.analysis.lead_quality,
    })
    return call.model_copy(update={"analysis": analysis})


def enrich_calls(
    calls: List[CallRecord],
    tenant_id: Optional[str],
    store,
    since: datetime,
    batch_size: int = ANALYSIS_BATCH_SIZE,
) -> EnrichmentResult:
    """
    Enrich calls with persisted analysis.

    Args:
        calls: Normalized calls, already scoped to the tenant.
        tenant_id: Owner of the persisted analysis rows.
        store: Object exposing lookup_by_call_ids(tenant_id, call_ids, since),
            or None when no analysis store is configured.
        since: Only analysis rows analyzed at or after this instant.
        batch_size: Max ids per lookup.

    Returns:
        EnrichmentResult with new CallRecord objects; the input is untouched.
    """
    if store is None or not tenant_id:
        return EnrichmentResult(
            calls=[merge_analysis(c, None) for c in calls],
            store_configured=False,
        )

    batches = chunk_ids([c.id for c in calls], size=batch_size)
    analyses: Dict[str, AnalysisRecord] = {}
    failed = 0

    for index, batch in enumerate(batches, start=1):
        try:
            rows = store.lookup_by_call_ids(tenant_id, batch, since)
        except Exception as e:
            failed += 1
            logger.error(
                "Analysis lookup chunk %d/%d (%d ids) failed, skipping: %s",
                index, len(batches), len(batch), e,
            )
            continue
        for row in rows or []:
            analyses[row.call_id] = row

    if failed:
        logger.warning(
            "Analysis enrichment degraded: %d of %d chunks failed",
            failed, len(batches),
        )
    logger.info(
        "Enriched %d calls with %d persisted analyses (%d chunks)",
        len(calls), len(analyses), len(batches),
    )

    return EnrichmentResult(
        calls=[merge_analysis(c, analyses.get(c.id)) for c in calls],
        analyses=analyses,
        chunks_total=len(batches),
        chunks_failed=failed,
    )
