from datetime import datetime

import pytest
from fastapi import HTTPException

from services.query import Pagination, build_audit_query, build_organization_query, parse_date_bound


def test_pagination_offset_and_total_pages():
    pagination = Pagination(page=3, limit=20)
    assert pagination.skip == 40
    assert pagination.meta(41) == {"page": 3, "limit": 20, "total": 41, "total_pages": 3}


def test_pagination_total_pages_for_empty_and_exact_results():
    assert Pagination(1, 10).meta(0)["total_pages"] == 0
    assert Pagination(1, 10).meta(30)["total_pages"] == 3


@pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-1, 5)])
def test_pagination_rejects_non_positive_values(page, limit):
    with pytest.raises(HTTPException) as exc:
        Pagination(page, limit)
    assert exc.value.status_code == 400


def test_pagination_has_no_upper_limit():
    assert Pagination(1, 100000).limit == 100000


def test_organization_query_omits_absent_filters():
    assert build_organization_query("bloodbank") == {"type": "bloodbank"}


def test_organization_query_combines_filters():
    query = build_organization_query(
        "bloodbank",
        status="APPROVED",
        city="mum",
        state="Maha",
        date_from=datetime(2025, 1, 1),
    )
    assert query["type"] == "bloodbank"
    assert query["status"] == "APPROVED"
    assert query["city"] == {"$regex": "mum", "$options": "i"}
    assert query["state"] == {"$regex": "Maha", "$options": "i"}
    assert query["created_at"] == {"$gte": datetime(2025, 1, 1)}


def test_text_filters_are_matched_literally():
    query = build_organization_query("bloodbank", city="St. (North)", search="a+b")
    assert query["city"]["$regex"] == r"St\.\ \(North\)"
    assert {"organization_code": {"$regex": r"a\+b", "$options": "i"}} in query["$or"]


def test_audit_query_builds_timestamp_window():
    query = build_audit_query(
        action="SUSPENDED",
        entity_code="BB-MUM-001",
        date_from=datetime(2025, 12, 1),
        date_to=datetime(2025, 12, 31),
    )
    assert query == {
        "action": "SUSPENDED",
        "entity_code": "BB-MUM-001",
        "timestamp": {"$gte": datetime(2025, 12, 1), "$lte": datetime(2025, 12, 31)},
    }


def test_date_only_upper_bound_covers_whole_day():
    bound = parse_date_bound("2025-12-31", "date_to", end=True)
    assert bound == datetime(2025, 12, 31, 23, 59, 59, 999000)


def test_aware_datetime_bound_is_normalized_to_naive_utc():
    bound = parse_date_bound("2025-12-31T10:00:00+05:30", "date_from")
    assert bound == datetime(2025, 12, 31, 4, 30)
    assert bound.tzinfo is None


def test_missing_bound_is_none():
    assert parse_date_bound(None, "date_from") is None
    assert parse_date_bound("", "date_from") is None


def test_unparseable_bound_is_rejected():
    with pytest.raises(HTTPException) as exc:
        parse_date_bound("yesterday", "date_from")
    assert exc.value.status_code == 400
    assert "date_from" in exc.value.detail
