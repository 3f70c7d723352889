from etl.rating_contract import (
    RATING_COLUMNS,
    rating_from_row,
    rating_to_db_row,
    signals_from_row,
    signals_to_db_row,
)
from services.rating_engine import ClinicSignals, compute_ratings


def test_signals_from_row_maps_columns(clinic_row):
    s = signals_from_row(clinic_row)
    assert s.external_rating == 4.5
    assert s.external_rating_count == 250
    assert s.doctor_experience_years == 12
    assert s.has_licenses is True
    assert s.online_booking is True
    assert s.convenient_location is True
    assert s.published_pricing is True


def test_null_flags_become_false(clinic_row):
    s = signals_from_row(clinic_row)
    assert s.has_certificates is False
    assert s.evening_hours is False
    assert s.interest_free_installment is False


def test_empty_row_gives_default_signals():
    assert signals_from_row({}) == ClinicSignals()
    assert signals_from_row(None) == ClinicSignals()


def test_malformed_numbers_are_treated_as_missing():
    s = signals_from_row({"google_rating": "n/a", "google_reviews_count": "", "doctor_experience": None})
    assert s.external_rating is None
    assert s.external_rating_count is None
    assert s.doctor_experience_years == 0


def test_string_booleans_from_legacy_rows():
    s = signals_from_row({"weekend_work": "true", "urgent_care": "0", "implant_warranty": 1})
    assert s.weekend_hours is True
    assert s.urgent_care_available is False
    assert s.implant_warranty is True


def test_signals_round_trip_through_columns(clinic_row):
    s = signals_from_row(clinic_row)
    assert signals_from_row(signals_to_db_row(s)) == s


def test_rating_to_db_row_uses_d_score_column():
    row = rating_to_db_row(compute_ratings(ClinicSignals()))
    assert set(row) == set(RATING_COLUMNS)
    assert row["d_score"] == 65
    assert row["price_index"] == 50


def test_rating_from_row(clinic_row):
    r = rating_from_row(clinic_row)
    assert r is not None
    assert r.composite_score == 65


def test_rating_from_row_missing_column():
    assert rating_from_row({"reviews_index": 80}) is None
