# etl/run_clinic_ratings.py
"""
Recompute clinic rating indices from stored attributes and write them
back into the clinics table.

Pipeline:
    clinics (DB row) -> rating_contract.signals_from_row()
                     -> rating_engine.compute_ratings()
                     -> rating_contract.rating_to_db_row()
                     -> PATCH clinics?id=eq.<id>

Only the index columns (reviews_index, trust_index, access_index,
price_index, d_score) and updated_at are written. Rows are updated in
place, never upserted: clinics carries NOT NULL columns (slug, name,
city_id) that a partial insert row would violate.

A row whose updated_at moved since it was read is left alone and
reported as stale; the admin write that moved it already stored
fresh indices.
"""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from config.app_env import load_app_env
from etl.rating_contract import (
    RATING_COLUMNS,
    SIGNAL_COLUMNS,
    rating_from_row,
    rating_to_db_row,
    signals_from_row,
)
from services.rating_engine import compute_ratings
from utils.supabase_client import _get, _patch

_SELECT = ",".join(("id", "name", "name_ru", "name_ro", "updated_at", *SIGNAL_COLUMNS, *RATING_COLUMNS))


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _label(row: Dict[str, Any]) -> str:
    return str(row.get("name_ru") or row.get("name_ro") or row.get("name") or row.get("id"))


# ---------------------------------------------------------------------
# Supabase fetchers
# ---------------------------------------------------------------------
def _fetch_clinics_page(table: str, limit: int, offset: int) -> List[Dict[str, Any]]:
    return _get(
        table,
        {
            "select": _SELECT,
            "order": "id.asc",
            "limit": str(limit),
            "offset": str(offset),
        },
    )


def _fetch_single_clinic(table: str, clinic_id: str) -> Optional[Dict[str, Any]]:
    rows = _get(
        table,
        {
            "select": _SELECT,
            "id": f"eq.{clinic_id}",
            "limit": "1",
        },
    )
    return rows[0] if rows else None


def _iter_clinic_pages(table: str, *, limit: int, offset: int, page_size: int):
    """
    Yields pages of at most page_size rows until `limit` rows were read
    or the table runs out.
    """
    read = 0
    while read < limit:
        size = min(page_size, limit - read)
        page = _fetch_clinics_page(table, limit=size, offset=offset + read)
        if not page:
            return
        yield page
        read += len(page)
        if len(page) < size:
            return


# ---------------------------------------------------------------------
# Row builder
# ---------------------------------------------------------------------
def build_rating_row(clinic_row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Index columns + updated_at for one clinics row (no id; the id goes
    into the PATCH filter).
    """
    if clinic_row.get("id") is None:
        raise ValueError("clinics row missing id")

    result = compute_ratings(signals_from_row(clinic_row))
    return {**rating_to_db_row(result), "updated_at": _now_iso()}


def _write_rating_row(table: str, clinic_row: Dict[str, Any], payload: Dict[str, Any]) -> bool:
    where = {"id": f"eq.{clinic_row['id']}"}
    if clinic_row.get("updated_at"):
        where["updated_at"] = f"eq.{clinic_row['updated_at']}"
    return bool(_patch(table, where, payload))


# ---------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------
def run(
    *,
    single_id: Optional[str],
    limit: int,
    offset: int,
    batch_size: int,
    dry_run: bool = False,
) -> Dict[str, int]:
    if batch_size <= 0:
        raise ValueError("--batch-size must be > 0")
    if limit <= 0:
        raise ValueError("--limit must be > 0")
    if offset < 0:
        raise ValueError("--offset must be >= 0")

    table = load_app_env().clinics_table

    if single_id is not None:
        row = _fetch_single_clinic(table, single_id)
        pages = [[row]] if row else []
    else:
        pages = _iter_clinic_pages(table, limit=limit, offset=offset, page_size=batch_size)

    stats = {"processed": 0, "changed": 0, "written": 0, "stale": 0, "failed": 0}

    for page in pages:
        for clinic_row in page:
            if not isinstance(clinic_row, dict):
                stats["failed"] += 1
                print("[run_clinic_ratings] Skipping malformed row (not a dict).")
                continue

            try:
                payload = build_rating_row(clinic_row)
            except ValueError as e:
                stats["failed"] += 1
                print(f"[run_clinic_ratings] ERROR clinic={clinic_row.get('id')}: {e}")
                continue

            stats["processed"] += 1
            old = rating_from_row(clinic_row)
            old_map = rating_to_db_row(old) if old else None
            new = {k: payload[k] for k in RATING_COLUMNS}

            if old_map == new:
                continue

            stats["changed"] += 1
            print(f"[run_clinic_ratings] {_label(clinic_row)}: {old_map} -> {new}")

            if dry_run:
                continue

            if _write_rating_row(table, clinic_row, payload):
                stats["written"] += 1
            else:
                stats["stale"] += 1
                print(f"[run_clinic_ratings] Stale row skipped: {_label(clinic_row)}")

    if stats["processed"] == 0 and stats["failed"] == 0:
        print("[run_clinic_ratings] No clinics found for the given range.")

    print(
        "[run_clinic_ratings] Done. "
        + ", ".join(f"{k}={v}" for k, v in stats.items())
    )
    return stats


if __name__ == "__main__":
    p = argparse.ArgumentParser(description="Recompute clinic rating indices (D-Score).")
    p.add_argument("--single-id", type=str, default=None, help="Recompute one clinic id only.")
    p.add_argument("--limit", type=int, default=5000, help="Maximum number of clinics to scan.")
    p.add_argument("--offset", type=int, default=0, help="Scan offset (rows ordered by id).")
    p.add_argument("--batch-size", type=int, default=500, help="Rows fetched per page.")
    p.add_argument("--dry-run", action="store_true", help="Print changes without writing.")
    args = p.parse_args()

    run(
        single_id=args.single_id,
        limit=args.limit,
        offset=args.offset,
        batch_size=args.batch_size,
        dry_run=args.dry_run,
    )
