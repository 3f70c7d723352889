# etl/rating_contract.py
"""
Clinic Rating Contract (DB ↔ Engine alignment)

This module defines the ONLY allowed mapping between:
- clinics table columns
- rating_engine.ClinicSignals / RatingResult

All rating reads and writes must use this.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from services.rating_engine import ClinicSignals, RatingResult

# ---------------------------------------------------------------------
# A) ClinicSignals field → DB column
# ---------------------------------------------------------------------
SIGNAL_TO_DB_COLUMN: Dict[str, str] = {
    "external_rating": "google_rating",
    "external_rating_count": "google_reviews_count",
    "doctor_experience_years": "doctor_experience",
    "has_licenses": "has_licenses",
    "has_certificates": "has_certificates",
    "online_booking": "online_booking",
    "weekend_hours": "weekend_work",
    "evening_hours": "evening_work",
    "urgent_care_available": "urgent_care",
    "convenient_location": "convenient_location",
    "published_pricing": "published_pricing",
    "free_consultation": "free_consultation",
    "interest_free_installment": "interest_free_installment",
    "implant_warranty": "implant_warranty",
    "popular_service_promotions": "popular_services_promotions",
    "online_price_calculator": "online_price_calculator",
}

BOOLEAN_SIGNALS = tuple(
    name for name in SIGNAL_TO_DB_COLUMN
    if name not in ("external_rating", "external_rating_count", "doctor_experience_years")
)

# ---------------------------------------------------------------------
# B) RatingResult field → DB column (denormalized indices)
# ---------------------------------------------------------------------
RATING_TO_DB_COLUMN: Dict[str, str] = {
    "reviews_index": "reviews_index",
    "trust_index": "trust_index",
    "access_index": "access_index",
    "price_index": "price_index",
    "composite_score": "d_score",
}

SIGNAL_COLUMNS = tuple(SIGNAL_TO_DB_COLUMN.values())
RATING_COLUMNS = tuple(RATING_TO_DB_COLUMN.values())


# ---------------------------------------------------------------------
# Coercion helpers (rows are never rejected, only normalized)
# ---------------------------------------------------------------------
def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "t", "yes")
    return bool(value)


def _as_float_or_none(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_int_or_none(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------
# C) DB row → ClinicSignals
# ---------------------------------------------------------------------
def signals_from_row(row: Dict[str, Any]) -> ClinicSignals:
    """
    Build a ClinicSignals snapshot from a clinics row.

    NULL flags become False, NULL experience becomes 0,
    malformed numerics are treated as missing.
    """
    row = row or {}
    kwargs: Dict[str, Any] = {
        name: _as_bool(row.get(SIGNAL_TO_DB_COLUMN[name]))
        for name in BOOLEAN_SIGNALS
    }
    kwargs["external_rating"] = _as_float_or_none(row.get("google_rating"))
    kwargs["external_rating_count"] = _as_int_or_none(row.get("google_reviews_count"))
    kwargs["doctor_experience_years"] = _as_int_or_none(row.get("doctor_experience")) or 0
    return ClinicSignals(**kwargs)


# ---------------------------------------------------------------------
# D) ClinicSignals → DB columns
# ---------------------------------------------------------------------
def signals_to_db_row(signals: ClinicSignals) -> Dict[str, Any]:
    return {
        column: getattr(signals, name)
        for name, column in SIGNAL_TO_DB_COLUMN.items()
    }


# ---------------------------------------------------------------------
# E) RatingResult → DB columns
# ---------------------------------------------------------------------
def rating_to_db_row(result: RatingResult) -> Dict[str, int]:
    return {
        column: int(getattr(result, name))
        for name, column in RATING_TO_DB_COLUMN.items()
    }


def rating_from_row(row: Dict[str, Any]) -> Optional[RatingResult]:
    """
    Read the stored indices back. Returns None when any column is missing.
    """
    values: Dict[str, int] = {}
    for name, column in RATING_TO_DB_COLUMN.items():
        v = _as_int_or_none((row or {}).get(column))
        if v is None:
            return None
        values[name] = v
    return RatingResult(**values)
