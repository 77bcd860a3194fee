import random

from services.ranking import cohort_fingerprint, rank_results


def positions(results):
    return {r.student_id: r.position for r in results}


def test_ties_share_a_position(make_result):
    results = [make_result(1, 90), make_result(2, 90), make_result(3, 80)]
    ranked = rank_results(results)

    assert [r.position for r in ranked] == [1, 1, 3]


def test_competition_ranking_skips(make_result):
    results = [make_result(1, 70), make_result(2, 95), make_result(3, 95), make_result(4, 95), make_result(5, 60)]
    rank_results(results)

    assert positions(results) == {1: 4, 2: 1, 3: 1, 4: 1, 5: 5}


def test_pending_results_are_not_ranked(make_result):
    results = [
        make_result(1, 99, result="Pending", position=1),
        make_result(2, 50, result="Fail"),
        make_result(3, 75),
    ]
    ranked = rank_results(results)

    assert [r.student_id for r in ranked] == [3, 2]
    assert positions(results) == {1: None, 2: 2, 3: 1}


def test_empty_and_all_pending_cohorts():
    assert rank_results([]) == []


def test_all_pending_cohort(make_result):
    results = [make_result(1, 50, result="Pending"), make_result(2, 40, result="Pending")]
    assert rank_results(results) == []
    assert positions(results) == {1: None, 2: None}


def test_stable_under_shuffle(make_result):
    percentages = [88.5, 72, 72, 91, 60, 88.5, 45, 72, 100, 33.33]
    expected = positions(rank_results([make_result(i, p) for i, p in enumerate(percentages, 1)]))

    rng = random.Random(7)
    for _ in range(5):
        shuffled = [make_result(i, p) for i, p in enumerate(percentages, 1)]
        rng.shuffle(shuffled)
        assert positions(rank_results(shuffled)) == expected


def test_fingerprint_changes_with_status(make_result):
    before = cohort_fingerprint([make_result(1, 80), make_result(2, 0, result="Pending")])
    after = cohort_fingerprint([make_result(1, 80), make_result(2, 60)])

    assert before != after
    assert before == cohort_fingerprint([make_result(2, 0, result="Pending"), make_result(1, 80)])
