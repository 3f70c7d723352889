from unittest.mock import patch

import pytest

from etl import run_clinic_ratings


UNCHANGED = {"id": "c-2", "reviews_index": 70, "trust_index": 70,
             "access_index": 70, "price_index": 50, "d_score": 65}


def test_build_rating_row(clinic_row):
    row = run_clinic_ratings.build_rating_row(clinic_row)
    assert row["d_score"] == 80
    assert "updated_at" in row
    assert "id" not in row


def test_build_rating_row_requires_id():
    with pytest.raises(ValueError):
        run_clinic_ratings.build_rating_row({"google_rating": 4.0})


def test_run_patches_changed_rows_in_place(clinic_row):
    with patch("etl.run_clinic_ratings._get", return_value=[clinic_row, UNCHANGED, "junk"]), \
         patch("etl.run_clinic_ratings._patch", return_value=[{"id": "c-1"}]) as mock_patch:
        stats = run_clinic_ratings.run(single_id=None, limit=100, offset=0, batch_size=50)

    assert stats["processed"] == 2
    assert stats["changed"] == 1
    assert stats["written"] == 1
    assert stats["failed"] == 1

    mock_patch.assert_called_once()
    table, where, payload = mock_patch.call_args.args
    assert table == "clinics"
    assert where == {"id": "eq.c-1"}
    # partial row: only indices, never identity columns
    assert set(payload) == {"reviews_index", "trust_index", "access_index", "price_index", "d_score", "updated_at"}


def test_run_never_posts_partial_rows(clinic_row):
    with patch("etl.run_clinic_ratings._get", return_value=[clinic_row]), \
         patch("etl.run_clinic_ratings._patch", return_value=[{"id": "c-1"}]), \
         patch("utils.supabase_client._session") as mock_session:
        run_clinic_ratings.run(single_id=None, limit=10, offset=0, batch_size=10)

    mock_session.post.assert_not_called()


def test_patch_is_conditional_on_updated_at(clinic_row):
    row = {**clinic_row, "updated_at": "2026-01-02T10:00:00+00:00"}
    with patch("etl.run_clinic_ratings._get", return_value=[row]), \
         patch("etl.run_clinic_ratings._patch", return_value=[]) as mock_patch:
        stats = run_clinic_ratings.run(single_id="c-1", limit=1, offset=0, batch_size=10)

    where = mock_patch.call_args.args[1]
    assert where == {"id": "eq.c-1", "updated_at": "eq.2026-01-02T10:00:00+00:00"}
    assert stats["stale"] == 1
    assert stats["written"] == 0


def test_run_scans_in_pages(clinic_row):
    rows = [{**clinic_row, "id": f"c-{i}"} for i in range(5)]
    offsets = []

    def _get(table, params):
        start, size = int(params["offset"]), int(params["limit"])
        offsets.append((start, size))
        return rows[start:start + size]

    with patch("etl.run_clinic_ratings._get", side_effect=_get), \
         patch("etl.run_clinic_ratings._patch", return_value=[{}]) as mock_patch:
        stats = run_clinic_ratings.run(single_id=None, limit=100, offset=0, batch_size=2)

    assert offsets == [(0, 2), (2, 2), (4, 2)]
    assert stats["written"] == 5
    assert [c.args[1]["id"] for c in mock_patch.call_args_list] == [f"eq.c-{i}" for i in range(5)]


def test_run_stops_at_limit(clinic_row):
    rows = [{**clinic_row, "id": f"c-{i}"} for i in range(10)]

    def _get(table, params):
        start, size = int(params["offset"]), int(params["limit"])
        return rows[start:start + size]

    with patch("etl.run_clinic_ratings._get", side_effect=_get), \
         patch("etl.run_clinic_ratings._patch", return_value=[{}]):
        stats = run_clinic_ratings.run(single_id=None, limit=3, offset=0, batch_size=2)

    assert stats["processed"] == 3


def test_dry_run_writes_nothing(clinic_row):
    with patch("etl.run_clinic_ratings._get", return_value=[clinic_row]), \
         patch("etl.run_clinic_ratings._patch") as mock_patch:
        stats = run_clinic_ratings.run(single_id="c-1", limit=1, offset=0, batch_size=10, dry_run=True)

    assert stats["changed"] == 1
    mock_patch.assert_not_called()


def test_run_validates_arguments():
    with pytest.raises(ValueError):
        run_clinic_ratings.run(single_id=None, limit=0, offset=0, batch_size=10)
    with pytest.raises(ValueError):
        run_clinic_ratings.run(single_id=None, limit=10, offset=-1, batch_size=10)
