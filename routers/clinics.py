from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query

from schemas import ClinicCard, ClinicListResponse, ClinicSignalsUpdate, RatingStats
from services import clinic_repository
from services.clinic_repository import StaleClinicError
from services.rating_live import apply_signal_updates, get_rating_stats

logger = logging.getLogger(__name__)

router = APIRouter(tags=["clinics"])

SortKey = Literal["dscore", "price", "trust", "reviews"]


# ============================================================
# Helpers
# ============================================================

def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _card(row: Dict[str, Any]) -> ClinicCard:
    name = row.get("name") or row.get("name_ru") or row.get("name_ro")
    return ClinicCard(
        id=str(row.get("id")),
        slug=row.get("slug"),
        name=name,
        name_ru=row.get("name_ru"),
        name_ro=row.get("name_ro"),
        city_id=None if row.get("city_id") is None else str(row.get("city_id")),
        logo_url=row.get("logo_url"),
        verified=bool(row.get("verified")),
        recommended=bool(row.get("recommended")),
        google_rating=row.get("google_rating"),
        google_reviews_count=row.get("google_reviews_count"),
        reviews_index=_as_int(row.get("reviews_index")),
        trust_index=_as_int(row.get("trust_index")),
        access_index=_as_int(row.get("access_index")),
        price_index=_as_int(row.get("price_index")),
        d_score=_as_int(row.get("d_score")),
    )


def _store_unavailable(e: RuntimeError) -> HTTPException:
    logger.error(f"Clinic store unavailable: {e}")
    return HTTPException(status_code=503, detail=str(e))


# ============================================================
# 1) GET /api/clinics
# ============================================================

@router.get("/api/clinics", response_model=ClinicListResponse)
def list_clinics(
    city: Optional[str] = Query(default=None),
    verified: Optional[bool] = Query(default=None),
    q: Optional[str] = Query(default=None),
    sort: SortKey = Query(default="dscore"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=12, ge=1, le=100),
):
    try:
        rows, total = clinic_repository.list_clinics(
            city=city, verified=verified, q=q, sort=sort, page=page, limit=limit,
        )
    except RuntimeError as e:
        raise _store_unavailable(e)

    return {"clinics": [_card(r) for r in rows], "total": total}


# ============================================================
# 2) GET /api/clinics/recommended
# ============================================================

@router.get("/api/clinics/recommended", response_model=List[ClinicCard])
def recommended_clinics():
    try:
        rows = clinic_repository.list_recommended()
    except RuntimeError as e:
        raise _store_unavailable(e)
    return [_card(r) for r in rows]


# ============================================================
# 3) GET /api/clinics/{slug}
# ============================================================

@router.get("/api/clinics/{slug}", response_model=ClinicCard)
def get_clinic(slug: str):
    try:
        row = clinic_repository.get_clinic_by_slug(slug)
    except RuntimeError as e:
        raise _store_unavailable(e)

    if not row:
        raise HTTPException(status_code=404, detail="Clinic not found")
    return _card(row)


# ============================================================
# 4) GET /api/admin/stats
# ============================================================

@router.get("/api/admin/stats", response_model=RatingStats)
def admin_stats():
    try:
        return get_rating_stats()
    except RuntimeError as e:
        raise _store_unavailable(e)


# ============================================================
# 5) PUT /api/admin/clinics/{clinic_id}/signals
# ============================================================

@router.put("/api/admin/clinics/{clinic_id}/signals")
def update_clinic_signals(clinic_id: str, body: ClinicSignalsUpdate):
    updates = body.to_updates()
    if not updates:
        raise HTTPException(status_code=400, detail="No rating fields provided")

    try:
        snapshot = apply_signal_updates(clinic_id, updates)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StaleClinicError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except RuntimeError as e:
        raise _store_unavailable(e)

    return {"message": "Clinic ratings updated", "snapshot": snapshot}
