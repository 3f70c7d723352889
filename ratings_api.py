"""
ratings_api.py

Clinic Rating API
────────────────────────────────────────
- Live preview (admin form, no persistence)
- Recompute one clinic (from stored attributes)
- Recompute all clinics

Notes:
- All scoring goes through services.rating_engine.compute_ratings()
- Persistence goes through services.rating_live (indices + attributes in one write)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from schemas import ClinicSignalsIn, RatingPreviewResponse
from services.clinic_repository import StaleClinicError
from services.rating_config import RATING_VERSION
from services.rating_engine import compute_ratings
from services.rating_live import recompute_all_ratings, recompute_clinic_ratings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/ratings",
    tags=["Clinic Ratings"],
)


# ============================================================
# 1. Preview
# ============================================================

@router.post("/preview", response_model=RatingPreviewResponse)
def preview_ratings(body: ClinicSignalsIn):
    """
    Computes indices + D-Score for the submitted attributes without saving.
    """
    result = compute_ratings(body.to_signals())
    return {"ratings": result.as_dict(), "version": RATING_VERSION}


# ============================================================
# 2. Recompute (single clinic)
# ============================================================

@router.post("/recompute/{clinic_id}")
def recompute_clinic(clinic_id: str):
    try:
        snapshot = recompute_clinic_ratings(clinic_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StaleClinicError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Recompute failed for clinic {clinic_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Rating recomputation failed: {e}")

    return {"message": "Ratings recomputed successfully", "snapshot": snapshot}


# ============================================================
# 3. Recompute all
# ============================================================

@router.post("/recompute-all")
def recompute_all():
    try:
        updated = recompute_all_ratings()
    except Exception as e:
        logger.error(f"Recompute-all failed: {e}")
        raise HTTPException(status_code=500, detail=f"Rating recompute-all failed: {e}")

    return {
        "message": "Rating recomputation completed",
        "updated_clinics": updated,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
