# services/rating_engine.py
"""
Clinic Rating Engine (D-Score)

Converts raw clinic attributes into:
- 4 sub-indices (reviews, trust, access, price)
- composite D-Score

Fixed points formula over explicit inputs; all constants live in
services.rating_config. Pure: no I/O, no state, never raises.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from services import rating_config as cfg


@dataclass(frozen=True)
class ClinicSignals:
    external_rating: Optional[float] = None
    external_rating_count: Optional[int] = None
    doctor_experience_years: int = 0
    has_licenses: bool = False
    has_certificates: bool = False

    # access
    online_booking: bool = False
    weekend_hours: bool = False
    evening_hours: bool = False
    urgent_care_available: bool = False
    convenient_location: bool = False

    # pricing transparency
    published_pricing: bool = False
    free_consultation: bool = False
    interest_free_installment: bool = False
    implant_warranty: bool = False
    popular_service_promotions: bool = False
    online_price_calculator: bool = False


@dataclass(frozen=True)
class RatingResult:
    reviews_index: int
    trust_index: int
    access_index: int
    price_index: int
    composite_score: int

    def as_dict(self) -> dict:
        return {
            "reviews_index": self.reviews_index,
            "trust_index": self.trust_index,
            "access_index": self.access_index,
            "price_index": self.price_index,
            "composite_score": self.composite_score,
        }


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


# ---------------------------
# Reviews Index
# ---------------------------
def compute_reviews_index(rating: Optional[float], count: Optional[int]) -> int:
    # No rating at all -> base, even if a review count is stored
    if not rating or rating <= 0:
        return cfg.REVIEWS_BASE

    rating_bonus = 0
    if rating >= cfg.REVIEWS_RATING_THRESHOLD:
        diff = min(rating - cfg.REVIEWS_RATING_THRESHOLD, cfg.REVIEWS_RATING_SPAN)
        rating_bonus = _round_half_up(diff * cfg.REVIEWS_RATING_POINTS)

    volume_bonus = 0
    if count and count > 0:
        volume_bonus = min(
            math.floor(count / cfg.REVIEWS_PER_VOLUME_STEP) * cfg.REVIEWS_POINTS_PER_STEP,
            cfg.REVIEWS_VOLUME_CAP,
        )

    return min(cfg.INDEX_CAP, cfg.REVIEWS_BASE + rating_bonus + volume_bonus)


# ---------------------------
# Trust Index
# ---------------------------
def compute_trust_index(years: int, has_licenses: bool, has_certificates: bool) -> int:
    score = cfg.TRUST_BASE
    if has_licenses:
        score += cfg.TRUST_LICENSE_POINTS
    if has_certificates:
        score += cfg.TRUST_CERTIFICATE_POINTS
    # negative years contribute nothing
    score += max(0, min(years or 0, cfg.TRUST_EXPERIENCE_CAP))
    return min(score, cfg.INDEX_CAP)


# ---------------------------
# Access Index
# ---------------------------
def compute_access_index(signals: ClinicSignals) -> int:
    enabled = sum(1 for name in cfg.ACCESS_FLAGS if getattr(signals, name))
    return min(cfg.ACCESS_BASE + enabled * cfg.ACCESS_POINTS_PER_FLAG, cfg.INDEX_CAP)


# ---------------------------
# Price Index
# ---------------------------
def compute_price_index(signals: ClinicSignals) -> int:
    points = sum(p for name, p in cfg.PRICE_POINTS.items() if getattr(signals, name))
    return min(cfg.PRICE_BASE + points, cfg.INDEX_CAP)


# ---------------------------
# Composite D-Score
# ---------------------------
def compute_composite(trust: int, reviews: int, price: int, access: int) -> int:
    w = cfg.COMPOSITE_WEIGHTS
    return _round_half_up(
        trust * w["trust"]
        + reviews * w["reviews"]
        + price * w["price"]
        + access * w["access"]
    )


def compute_ratings(signals: ClinicSignals) -> RatingResult:
    reviews = compute_reviews_index(signals.external_rating, signals.external_rating_count)
    trust = compute_trust_index(
        signals.doctor_experience_years,
        signals.has_licenses,
        signals.has_certificates,
    )
    access = compute_access_index(signals)
    price = compute_price_index(signals)

    return RatingResult(
        reviews_index=reviews,
        trust_index=trust,
        access_index=access,
        price_index=price,
        composite_score=compute_composite(trust, reviews, price, access),
    )
