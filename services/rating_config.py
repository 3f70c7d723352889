# services/rating_config.py
from __future__ import annotations

from typing import Dict

RATING_VERSION = "dscore_v2"

# ------------------------------------------------------------
# Reviews index (external aggregator rating + volume)
# ------------------------------------------------------------
REVIEWS_BASE = 70
REVIEWS_RATING_THRESHOLD = 4.0
REVIEWS_RATING_SPAN = 1.0          # 4.0 .. 5.0
REVIEWS_RATING_POINTS = 20
REVIEWS_PER_VOLUME_STEP = 100
REVIEWS_POINTS_PER_STEP = 2
REVIEWS_VOLUME_CAP = 10

# ------------------------------------------------------------
# Trust index (credentials + experience)
# ------------------------------------------------------------
TRUST_BASE = 70
TRUST_LICENSE_POINTS = 5
TRUST_CERTIFICATE_POINTS = 5
TRUST_EXPERIENCE_CAP = 20          # one point per year

# ------------------------------------------------------------
# Access index (flat points per true flag)
# ------------------------------------------------------------
ACCESS_BASE = 70
ACCESS_POINTS_PER_FLAG = 6
ACCESS_FLAGS = (
    "online_booking",
    "weekend_hours",
    "evening_hours",
    "urgent_care_available",
    "convenient_location",
)

# ------------------------------------------------------------
# Price index (asymmetric points per flag)
# ------------------------------------------------------------
PRICE_BASE = 50
PRICE_POINTS: Dict[str, int] = {
    "published_pricing": 15,
    "implant_warranty": 10,
    "popular_service_promotions": 10,
    "free_consultation": 5,
    "interest_free_installment": 5,
    "online_price_calculator": 5,
}

INDEX_CAP = 100

# ------------------------------------------------------------
# Composite (D-Score) weights, must sum to 1.0
# ------------------------------------------------------------
COMPOSITE_WEIGHTS: Dict[str, float] = {
    "trust": 0.30,
    "reviews": 0.25,
    "price": 0.25,
    "access": 0.20,
}


def validate_weights() -> None:
    total = sum(COMPOSITE_WEIGHTS.values())
    if abs(total - 1.0) > 1e-9:
        raise ValueError(f"COMPOSITE_WEIGHTS must sum to 1.0. Current sum = {total}")


def validate_price_points() -> None:
    total = PRICE_BASE + sum(PRICE_POINTS.values())
    if total != INDEX_CAP:
        raise ValueError(f"PRICE_BASE + PRICE_POINTS must reach {INDEX_CAP}. Current sum = {total}")


validate_weights()
validate_price_points()
