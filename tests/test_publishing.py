from datetime import datetime

import pytest

from services.publishing import publish_results, unpublish_results


def test_publish_batch_with_pending_warns(make_result):
    now = datetime(2025, 10, 1, 9, 30)
    results = [make_result(1, 80), make_result(2, 0, result="Pending"), make_result(3, 30, result="Fail")]

    outcome = publish_results(results, now=now)

    assert all(r.is_published for r in results)
    assert all(r.published_date == now for r in results)
    assert outcome.has_warnings
    assert outcome.pending_ids == [2]

    data = outcome.as_dict()
    assert data["matched_count"] == 3
    assert data["modified_count"] == 3
    assert data["published_date"] == "2025-10-01T09:30:00"
    assert [w["result_id"] for w in data["warnings"]] == [2]


def test_republish_keeps_original_date(make_result):
    first = datetime(2025, 1, 1)
    results = [make_result(1, 80, is_published=True, published_date=first), make_result(2, 70)]

    outcome = publish_results(results, now=datetime(2025, 2, 1))

    assert results[0].published_date == first
    assert results[1].published_date == datetime(2025, 2, 1)
    assert outcome.changed_ids == [2]
    assert not outcome.has_warnings


def test_unpublish_clears_flag_and_date(make_result):
    results = [
        make_result(1, 80, is_published=True, published_date=datetime(2025, 1, 1)),
        make_result(2, 70),
    ]
    outcome = unpublish_results(results)

    assert [r.is_published for r in results] == [False, False]
    assert [r.published_date for r in results] == [None, None]
    assert outcome.changed_ids == [1]
    assert outcome.as_dict()["published_date"] is None


def test_publish_empty_batch():
    outcome = publish_results([])
    assert outcome.matched_ids == []
    assert not outcome.has_warnings


@pytest.mark.filterwarnings("error::DeprecationWarning")
def test_publish_defaults_to_naive_utc_now(make_result):
    before = datetime.now()
    result = make_result(1, 80)

    outcome = publish_results([result])

    assert result.published_date is not None
    assert result.published_date.tzinfo is None
    assert outcome.published_date == result.published_date
    # naive UTC, so within a day of local time whatever the zone
    assert abs((result.published_date - before).total_seconds()) < 86400
