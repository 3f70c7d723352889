"""
Supabase access for the rating backend.

- `supabase`: supabase-py Client, or None when credentials are missing
  (import never fails, so the API can boot without a store).
- `_get` / `_patch`: thin PostgREST helpers used by the batch rating job.
  Writes are PATCH-only; clinic rows are never inserted from here.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from config.supabase_env import load_supabase_env

logger = logging.getLogger(__name__)

_ENV = load_supabase_env()

SUPABASE_URL: str = _ENV.url or ""
SUPABASE_KEY: str = _ENV.key or ""

supabase = None  # type: ignore
try:
    from supabase import create_client  # type: ignore

    if SUPABASE_URL and SUPABASE_KEY:
        supabase = create_client(SUPABASE_URL, SUPABASE_KEY)
except Exception as e:
    logger.warning(f"Supabase client unavailable (startup continues): {e}")
    supabase = None  # type: ignore

_session = requests.Session()
_TIMEOUT_SECONDS = 20


def is_supabase_configured() -> bool:
    return bool(SUPABASE_URL and SUPABASE_KEY)


def _table_url(table: str) -> str:
    if not is_supabase_configured():
        raise RuntimeError(
            "Supabase is not configured. Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY "
            "(or SUPABASE_ANON_KEY)."
        )
    return f"{SUPABASE_URL.rstrip('/')}/rest/v1/{table.lstrip('/')}"


def _headers(*, prefer: Optional[str] = None) -> Dict[str, str]:
    h = {
        "apikey": SUPABASE_KEY,
        "Authorization": f"Bearer {SUPABASE_KEY}",
        "Content-Type": "application/json",
    }
    if prefer:
        h["Prefer"] = prefer
    return h


def _as_rows(resp: requests.Response, verb: str) -> List[Dict[str, Any]]:
    if resp.status_code == 401:
        raise RuntimeError("Unauthorized: invalid Supabase API key (check the service role key).")
    if resp.status_code >= 400:
        raise RuntimeError(f"Supabase {verb} failed [{resp.status_code}]: {resp.text}")

    try:
        data = resp.json()
    except ValueError:
        return []
    if isinstance(data, list):
        return data
    return [data] if data else []


def _get(table: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
    resp = _session.get(
        _table_url(table),
        headers=_headers(),
        params=params,
        timeout=_TIMEOUT_SECONDS,
    )
    return _as_rows(resp, "GET")


def _patch(table: str, where_params: Dict[str, str], payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    UPDATE ... WHERE <where_params>. Returns the updated rows; an empty
    list means no row matched the filter.
    """
    resp = _session.patch(
        _table_url(table),
        headers=_headers(prefer="return=representation"),
        params=where_params,
        json=payload,
        timeout=_TIMEOUT_SECONDS,
    )
    return _as_rows(resp, "PATCH")
