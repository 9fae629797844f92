"""
Callboard — Call Analytics Router
===================================
Tenant-scoped call analytics computed live from Vapi + persisted analysis.

The caller's user id arrives in the X-User-Id header, set by the auth layer
in front of this service.

Endpoints:
  GET /api/calls/analytics   - Metrics, recent calls and trends for a range
  GET /api/calls/recent      - Newest calls only
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

from models.call_models import AnalyticsSnapshot, RecentCallsResponse
from scripts.analytics.engine import CallAnalyticsEngine
from scripts.lib.errors import ProviderTimeoutError, ProviderUnavailableError
from scripts.lib.logger import setup_logger

logger = setup_logger("call_analytics_router")

router = APIRouter(prefix="/api/calls", tags=["call-analytics"])


def get_engine(request: Request) -> CallAnalyticsEngine:
    engine = getattr(request.app.state, "analytics", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Analytics engine not loaded")
    return engine


def _provider_http_error(e: ProviderUnavailableError) -> HTTPException:
    if isinstance(e, ProviderTimeoutError):
        return HTTPException(status_code=504, detail="Call provider timed out")
    return HTTPException(status_code=502, detail="Failed to fetch calls from provider")


@router.get("/analytics", response_model=AnalyticsSnapshot)
async def call_analytics(
    days: int = Query(30, ge=1, le=365, description="Range in days, counted back from now"),
    limit: int = Query(20, ge=1, le=100, description="Max recent calls"),
    refresh: bool = Query(False, description="Bypass the snapshot cache"),
    user_id: str = Header(..., alias="X-User-Id"),
    engine: CallAnalyticsEngine = Depends(get_engine),
):
    """Analytics snapshot for the caller's tenant."""
    try:
        return await engine.compute_for_user(
            user_id, days=days, limit=limit, force_refresh=refresh,
        )
    except ProviderUnavailableError as e:
        logger.error("Analytics unavailable, provider failed: %s", e)
        raise _provider_http_error(e)
    except Exception as e:
        logger.error("Analytics calculation failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Error calculating analytics")


@router.get("/recent", response_model=RecentCallsResponse)
async def recent_calls(
    limit: int = Query(20, ge=1, le=100, description="Max calls"),
    user_id: str = Header(..., alias="X-User-Id"),
    engine: CallAnalyticsEngine = Depends(get_engine),
):
    """Newest calls for the caller's tenant."""
    try:
        calls = await engine.recent_calls_for_user(user_id, limit=limit)
        return RecentCallsResponse(results=calls, count=len(calls))
    except ProviderUnavailableError as e:
        logger.error("Recent calls unavailable, provider failed: %s", e)
        raise _provider_http_error(e)
    except Exception as e:
        logger.error("Recent calls fetch failed: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching calls")
