"""
Supabase Client Helper for Callboard.
Provides the shared, read-only connection used by the analysis store and the
tenant resolver.

Usage:
    from scripts.lib.supabase_client import get_client, is_configured

    client = get_client()
    rows = client.table("call_analysis").select("*").eq("user_id", uid).execute()
"""
import os
from pathlib import Path

from dotenv import load_dotenv

from scripts.lib.errors import ConfigError
from scripts.lib.logger import setup_logger

logger = setup_logger("supabase_client")

# Load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")

_client = None


def _credentials() -> tuple:
    url = os.environ.get("SUPABASE_URL", "")
    key = (
        os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
        or os.environ.get("SUPABASE_KEY", "")
    )
    return url, key


def is_configured() -> bool:
    """True when both the Supabase URL and a key are present."""
    url, key = _credentials()
    return bool(url and key)


def get_client():
    """Create and return a Supabase client (singleton)."""
    global _client
    if _client is not None:
        return _client

    url, key = _credentials()
    if not url or not key:
        raise ConfigError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in .env",
            setting="SUPABASE_URL",
        )

    from supabase import create_client
    _client = create_client(url, key)
    logger.info("Supabase client connected to %s", url)
    return _client
