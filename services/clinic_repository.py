# services/clinic_repository.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from config.app_env import load_app_env
from utils import supabase_client

# ==========================================================
# CONSTANTS
# ==========================================================
# sort key -> (column, descending)
SORT_COLUMNS: Dict[str, Tuple[str, bool]] = {
    "dscore": ("d_score", True),
    "price": ("price_index", False),
    "trust": ("trust_index", True),
    "reviews": ("reviews_index", True),
}

RECOMMENDED_LIMIT = 6
PAGE_SIZE = 1000  # PostgREST default max-rows


class StaleClinicError(RuntimeError):
    """The clinic row changed between read and conditional write."""


def _table() -> str:
    return load_app_env().clinics_table


def _db():
    client = supabase_client.supabase
    if client is None:
        raise RuntimeError("Supabase client not configured (SUPABASE_URL / key missing).")
    return client


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ==========================================================
# READ
# ==========================================================
def get_clinic(clinic_id: str) -> Optional[Dict[str, Any]]:
    """
    Fetch one clinic row by id. Returns None if no row exists.
    """
    res = (
        _db()
        .table(_table())
        .select("*")
        .eq("id", clinic_id)
        .limit(1)
        .execute()
    )
    return res.data[0] if res.data else None


def get_clinic_by_slug(slug: str) -> Optional[Dict[str, Any]]:
    res = (
        _db()
        .table(_table())
        .select("*")
        .eq("slug", slug)
        .limit(1)
        .execute()
    )
    return res.data[0] if res.data else None


def list_clinics(
    *,
    city: Optional[str] = None,
    verified: Optional[bool] = None,
    q: Optional[str] = None,
    sort: str = "dscore",
    page: int = 1,
    limit: int = 12,
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Paginated, filtered clinic listing.

    Returns (rows, total) where total counts all matching rows.
    """
    if sort not in SORT_COLUMNS:
        raise ValueError(f"Unknown sort key: {sort}")

    column, desc = SORT_COLUMNS[sort]
    page = max(1, page)
    start = (page - 1) * limit

    query = _db().table(_table()).select("*", count="exact")

    if city:
        query = query.eq("city_id", city)
    if verified is not None:
        query = query.eq("verified", verified)
    if q:
        query = query.ilike("name", f"%{q}%")

    res = (
        query
        .order(column, desc=desc)
        .range(start, start + limit - 1)
        .execute()
    )

    rows = res.data or []
    total = res.count if res.count is not None else len(rows)
    return rows, total


def list_recommended(limit: int = RECOMMENDED_LIMIT) -> List[Dict[str, Any]]:
    res = (
        _db()
        .table(_table())
        .select("*")
        .eq("recommended", True)
        .order("d_score", desc=True)
        .limit(limit)
        .execute()
    )
    return res.data or []


def fetch_clinic_columns(columns: str = "*", page_size: int = PAGE_SIZE) -> List[Dict[str, Any]]:
    """
    Reads `columns` for every clinic, page by page, so PostgREST's
    max-rows limit never truncates the result.
    """
    rows: List[Dict[str, Any]] = []
    start = 0
    while True:
        res = (
            _db()
            .table(_table())
            .select(columns)
            .order("id")
            .range(start, start + page_size - 1)
            .execute()
        )
        page = res.data or []
        rows.extend(page)
        if len(page) < page_size:
            return rows
        start += page_size


# ==========================================================
# WRITE
# ==========================================================
def update_clinic(
    clinic_id: str,
    payload: Dict[str, Any],
    *,
    expected_updated_at: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Single-row update. Attributes and the indices derived from them
    must travel in the same payload.

    With expected_updated_at the write only lands if the row was not
    modified since it was read; otherwise StaleClinicError is raised
    and nothing is written.
    """
    body = {**payload, "updated_at": _now_iso()}

    query = (
        _db()
        .table(_table())
        .update(body)
        .eq("id", clinic_id)
    )
    if expected_updated_at:
        query = query.eq("updated_at", expected_updated_at)

    res = query.execute()

    if res.data:
        return res.data[0]
    if expected_updated_at and get_clinic(clinic_id):
        raise StaleClinicError(f"Clinic {clinic_id} was modified concurrently; reload and retry")
    raise ValueError(f"Clinic not found: {clinic_id}")
