from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from services.rating_engine import ClinicSignals


# ============================================================
# RATING INPUT (ADMIN FORM / PREVIEW)
# ============================================================
class ClinicSignalsIn(BaseModel):
    """
    Validated rating inputs for one clinic.

    Range checks happen here, before ClinicSignals is built;
    the engine itself never rejects input.
    """

    external_rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    external_rating_count: Optional[int] = Field(default=None, ge=0)
    doctor_experience_years: int = Field(default=0, ge=0)
    has_licenses: bool = False
    has_certificates: bool = False

    # ----------------------------------------
    # ACCESS
    # ----------------------------------------
    online_booking: bool = False
    weekend_hours: bool = False
    evening_hours: bool = False
    urgent_care_available: bool = False
    convenient_location: bool = False

    # ----------------------------------------
    # PRICING TRANSPARENCY
    # ----------------------------------------
    published_pricing: bool = False
    free_consultation: bool = False
    interest_free_installment: bool = False
    implant_warranty: bool = False
    popular_service_promotions: bool = False
    online_price_calculator: bool = False

    def to_signals(self) -> ClinicSignals:
        return ClinicSignals(**self.model_dump())


# ============================================================
# PARTIAL RATING INPUT UPDATE
# ============================================================
class ClinicSignalsUpdate(BaseModel):
    """
    Partial update of rating inputs. Only fields present in the
    request body are applied; explicit null on a flag means False.
    """

    external_rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    external_rating_count: Optional[int] = Field(default=None, ge=0)
    doctor_experience_years: Optional[int] = Field(default=None, ge=0)
    has_licenses: Optional[bool] = None
    has_certificates: Optional[bool] = None
    online_booking: Optional[bool] = None
    weekend_hours: Optional[bool] = None
    evening_hours: Optional[bool] = None
    urgent_care_available: Optional[bool] = None
    convenient_location: Optional[bool] = None
    published_pricing: Optional[bool] = None
    free_consultation: Optional[bool] = None
    interest_free_installment: Optional[bool] = None
    implant_warranty: Optional[bool] = None
    popular_service_promotions: Optional[bool] = None
    online_price_calculator: Optional[bool] = None

    def to_updates(self) -> Dict[str, Any]:
        updates = self.model_dump(exclude_unset=True)
        for key, value in updates.items():
            if value is None and key not in ("external_rating", "external_rating_count"):
                updates[key] = 0 if key == "doctor_experience_years" else False
        return updates


# ============================================================
# RATING OUTPUT
# ============================================================
class RatingResultOut(BaseModel):
    reviews_index: int
    trust_index: int
    access_index: int
    price_index: int
    composite_score: int


class RatingPreviewResponse(BaseModel):
    ratings: RatingResultOut
    version: str


# ============================================================
# CLINIC CARD (READ-FACING)
# ============================================================
class ClinicCard(BaseModel):
    id: str
    slug: Optional[str] = None
    name: Optional[str] = None
    name_ru: Optional[str] = None
    name_ro: Optional[str] = None
    city_id: Optional[str] = None
    logo_url: Optional[str] = None
    verified: bool = False
    recommended: bool = False

    google_rating: Optional[float] = None
    google_reviews_count: Optional[int] = None

    reviews_index: int = 0
    trust_index: int = 0
    access_index: int = 0
    price_index: int = 0
    d_score: int = 0


class ClinicListResponse(BaseModel):
    clinics: List[ClinicCard] = Field(default_factory=list)
    total: int = 0


class RatingStats(BaseModel):
    total_clinics: int
    verified_clinics: int
    average_d_score: float
