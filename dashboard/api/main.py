"""
Callboard — API Server
========================

Live analytics API for the AI phone-answering dashboard. Call records come
from Vapi; persisted sentiment / lead quality come from Supabase.

Route groups:
  /api/health          - Health check
  /api/calls/*         - Tenant-scoped call analytics and recent calls
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

logger = logging.getLogger(__name__)


def _analytics_timezone() -> Optional[ZoneInfo]:
    name = os.getenv("ANALYTICS_TIMEZONE")
    if not name:
        return None  # server local time
    try:
        return ZoneInfo(name)
    except Exception as e:
        logger.warning("Invalid ANALYTICS_TIMEZONE %r, using server local time: %s", name, e)
        return None


def build_engine():
    """Wire the analytics engine from environment configuration."""
    from integrations.vapi import VapiIntegration
    from scripts.analytics.engine import CallAnalyticsEngine
    from scripts.lib import supabase_client
    from scripts.lib.call_analysis_store import SupabaseAnalysisStore, SupabaseTenantResolver
    from scripts.lib.snapshot_cache import SnapshotCache

    provider = VapiIntegration()
    if supabase_client.is_configured():
        store, resolver = SupabaseAnalysisStore(), SupabaseTenantResolver()
    else:
        logger.warning("Supabase not configured — tenants cannot be resolved")
        store, resolver = None, None

    cache_enabled = os.getenv("ANALYTICS_CACHE_ENABLED", "true").lower() == "true"
    return CallAnalyticsEngine(
        provider=provider,
        analysis_store=store,
        tenant_resolver=resolver,
        cache=SnapshotCache() if cache_enabled else None,
        tz=_analytics_timezone(),
    )


# ─── Lifespan ─────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app):
    """Application startup and shutdown."""
    logger.info("Starting Callboard...")

    try:
        app.state.analytics = build_engine()
        status = "configured" if app.state.analytics.provider.is_configured else "not configured"
        logger.info("Vapi provider: %s", status)
    except Exception as e:
        logger.warning("Analytics engine not available: %s", e)
        app.state.analytics = None

    logger.info("Callboard ready")
    yield
    logger.info("Shutting down Callboard...")


# ─── App Setup ────────────────────────────────────────────────

cors_origins = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:8001"
).split(",")

app = FastAPI(
    title="Callboard",
    version="1.0.0",
    description="Call analytics for the AI phone-answering dashboard",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Include Routers ──────────────────────────────────────────

from dashboard.api.routers.call_analytics import router as call_analytics_router

app.include_router(call_analytics_router)


# ─── Health ───────────────────────────────────────────────────

@app.get("/api/health", tags=["system"])
async def health():
    """Health check with service status."""
    from scripts.lib import supabase_client

    engine = getattr(app.state, "analytics", None)
    provider = engine.provider if engine is not None else None

    return {
        "status": "healthy" if engine is not None else "degraded",
        "service": "Callboard",
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "integrations": {
            "supabase": supabase_client.is_configured(),
            "vapi": provider.get_status() if provider is not None else None,
        },
        "cache_enabled": engine is not None and engine.cache is not None,
    }
