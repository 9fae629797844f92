"""
Vapi Integration
=================

Reads call records from the Vapi voice-call API:
- Call listing (GET /call)

Every request is bounded by an explicit timeout and guarded by a circuit
breaker. Failures raise ProviderUnavailableError; nothing is retried.

Setup:
1. Get the private API key from Vapi -> Dashboard -> API Keys
2. Set VAPI_PRIVATE_KEY in .env (VAPI_API_URL to override the base URL)
"""

import asyncio
import os
from typing import Any, Dict, List, Optional

import aiohttp

from scripts.lib.circuit_breaker import CircuitBreaker
from scripts.lib.errors import (
    ProviderNotConfiguredError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from scripts.lib.logger import setup_logger

logger = setup_logger("vapi")

VAPI_API_URL = "https://api.vapi.ai"
USER_AGENT = "callboard-dashboard/1.0"


class VapiIntegration:
    """Vapi call provider connector."""

    def __init__(self):
        self.api_key = os.getenv("VAPI_PRIVATE_KEY")
        self.base_url = os.getenv("VAPI_API_URL", VAPI_API_URL).rstrip("/")
        self.default_limit = int(os.getenv("VAPI_FETCH_LIMIT", "1000"))
        self.default_timeout = float(os.getenv("VAPI_TIMEOUT_SECONDS", "15"))
        self.breaker = CircuitBreaker.get("vapi", failure_threshold=5, reset_timeout=60)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        """Build authorization headers."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    async def _get_json(self, path: str, params: dict, timeout: float) -> Any:
        """GET a JSON document from the Vapi API, raising on any failure."""
        url = f"{self.base_url}{path}"
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as session:
                async with session.get(url, headers=self._headers(), params=params) as resp:
                    if resp.status != 200:
                        text = await resp.text()
                        logger.error("Vapi API GET %s returned %s: %s", path, resp.status, text[:500])
                        raise ProviderUnavailableError(
                            f"Vapi API returned {resp.status}",
                            status_code=resp.status, url=url,
                        )
                    return await resp.json()
        except asyncio.TimeoutError:
            logger.error("Vapi API GET %s timed out after %.1fs", path, timeout)
            raise ProviderTimeoutError(url, timeout)
        except aiohttp.ClientError as e:
            logger.error("Vapi API GET %s failed: %s", path, e)
            raise ProviderUnavailableError(f"Vapi API request failed: {e}", url=url)
        except ValueError as e:
            logger.error("Vapi API GET %s returned invalid JSON: %s", path, e)
            raise ProviderUnavailableError("Vapi API returned invalid JSON", url=url)

    @staticmethod
    def _extract_calls(payload: Any) -> List[Dict]:
        """Accept both a bare list and a {"data": [...]} envelope."""
        if isinstance(payload, dict):
            payload = payload.get("data")
        if not isinstance(payload, list):
            return []
        return [call for call in payload if isinstance(call, dict)]

    async def list_calls(self, limit: Optional[int] = None, timeout: Optional[float] = None) -> List[Dict]:
        """
        Fetch raw call objects.

        Args:
            limit: Max calls to request (default VAPI_FETCH_LIMIT).
            timeout: Total request timeout in seconds (default VAPI_TIMEOUT_SECONDS).

        Raises:
            ProviderUnavailableError: Not configured, circuit open, HTTP or
                network failure, or timeout.
        """
        if not self.is_configured:
            logger.warning("Vapi is not configured — set VAPI_PRIVATE_KEY in .env")
            raise ProviderNotConfiguredError("Vapi")

        self.breaker.check()
        limit = limit or self.default_limit
        timeout = timeout or self.default_timeout

        try:
            payload = await self._get_json("/call", {"limit": str(limit)}, timeout)
        except ProviderUnavailableError:
            self.breaker.record_failure()
            raise
        self.breaker.record_success()

        calls = self._extract_calls(payload)
        logger.info("Fetched %d calls from Vapi (limit %d)", len(calls), limit)
        return calls

    def get_status(self) -> Dict[str, Any]:
        return {
            "name": "Vapi",
            "configured": self.is_configured,
            "features": ["calls"],
            "circuit": self.breaker.status(),
        }
