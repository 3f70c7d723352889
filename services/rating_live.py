# services/rating_live.py

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from etl.rating_contract import (
    rating_from_row,
    rating_to_db_row,
    signals_from_row,
    signals_to_db_row,
)
from services import clinic_repository
from services.rating_config import RATING_VERSION
from services.rating_engine import ClinicSignals, compute_ratings

logger = logging.getLogger(__name__)


def _snapshot(clinic_id: str, row: Dict[str, Any], previous: Optional[Dict[str, int]]) -> Dict[str, Any]:
    stored = rating_from_row(row)
    return {
        "clinic_id": clinic_id,
        "ratings": stored.as_dict() if stored else None,
        "previous": previous,
        "version": RATING_VERSION,
        "computed_at": datetime.now(timezone.utc).isoformat(),
    }


def _previous_ratings(row: Dict[str, Any]) -> Optional[Dict[str, int]]:
    prev = rating_from_row(row)
    return prev.as_dict() if prev else None


def _persist(clinic_id: str, row: Dict[str, Any], signals: ClinicSignals, write_signals: bool) -> Dict[str, Any]:
    result = compute_ratings(signals)

    payload = rating_to_db_row(result)
    if write_signals:
        # same write as the indices so stored values never drift apart
        payload.update(signals_to_db_row(signals))

    # conditional on the version that was read; a concurrent write raises StaleClinicError
    return clinic_repository.update_clinic(
        clinic_id, payload, expected_updated_at=row.get("updated_at"),
    )


def recompute_clinic_ratings(clinic_id: str) -> Dict[str, Any]:
    """
    Recomputes ratings for a single clinic from its stored attributes
    and writes the indices back.
    """
    row = clinic_repository.get_clinic(clinic_id)
    if not row:
        raise ValueError(f"Clinic not found: {clinic_id}")

    previous = _previous_ratings(row)
    updated = _persist(clinic_id, row, signals_from_row(row), write_signals=False)

    logger.info(f"Ratings recomputed for clinic {clinic_id}: d_score={updated.get('d_score')}")
    return _snapshot(clinic_id, updated, previous)


def apply_signal_updates(clinic_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merges partial rating-input updates into the stored clinic,
    recomputes, and persists attributes + indices together.

    `updates` is keyed by ClinicSignals field names.
    """
    row = clinic_repository.get_clinic(clinic_id)
    if not row:
        raise ValueError(f"Clinic not found: {clinic_id}")

    previous = _previous_ratings(row)
    signals = replace(signals_from_row(row), **updates)
    updated = _persist(clinic_id, row, signals, write_signals=True)

    logger.info(f"Signals updated for clinic {clinic_id}: fields={sorted(updates)}")
    return _snapshot(clinic_id, updated, previous)


def recompute_all_ratings() -> int:
    """
    Recomputes ratings for every clinic.
    Returns number of updated clinics.
    """
    rows = clinic_repository.fetch_clinic_columns("id")
    count = 0

    for row in rows:
        clinic_id = row.get("id")
        if clinic_id is None:
            continue
        try:
            recompute_clinic_ratings(str(clinic_id))
            count += 1
        except Exception as e:
            logger.warning(f"Skipped clinic {clinic_id}: {e}")

    return count


def get_rating_stats() -> Dict[str, Any]:
    rows = clinic_repository.fetch_clinic_columns("id,verified,d_score")

    scores = [int(r["d_score"]) for r in rows if r.get("d_score") is not None]
    return {
        "total_clinics": len(rows),
        "verified_clinics": sum(1 for r in rows if r.get("verified")),
        "average_d_score": round(sum(scores) / len(scores), 2) if scores else 0,
    }
