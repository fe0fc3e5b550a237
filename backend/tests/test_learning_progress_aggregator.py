"""
Progress aggregation - pure derivation over proofs and published modules.
"""
from __future__ import annotations

from backend.learning.progress import summarize_progress


MODULES = [
    {"week_number": 2, "title": "Loops", "is_published": True},
    {"week_number": 1, "title": "Basics", "is_published": True},
    {"week_number": 3, "title": "Draft", "is_published": False},
]


def test_empty_inputs_yield_zero_progress():
    summary = summarize_progress([], [])
    assert summary.total_count == 0
    assert summary.completed_count == 0
    assert summary.percent == 0
    assert summary.weeks == []


def test_weeks_follow_published_modules_in_order():
    summary = summarize_progress([], MODULES)
    assert [w.week_number for w in summary.weeks] == [1, 2]
    assert summary.total_count == 2


def test_pending_counts_as_completed_but_not_verified():
    summary = summarize_progress([{"week": 1, "status": "pending"}], MODULES)
    week1 = summary.weeks[0]
    assert week1.completed is True
    assert week1.verified is False
    assert summary.completed_count == 0
    assert summary.submitted_count == 1


def test_any_verified_proof_marks_the_week_verified():
    proofs = [
        {"week": 2, "status": "rejected", "submitted_at": "2026-01-01T10:00:00+00:00"},
        {"week": 2, "status": "verified", "submitted_at": "2026-01-02T10:00:00+00:00"},
        {"week": 2, "status": "pending", "submitted_at": "2026-01-03T10:00:00+00:00"},
    ]
    summary = summarize_progress(proofs, MODULES)
    week2 = summary.weeks[1]
    assert week2.verified is True
    assert week2.latest_status == "pending"
    assert summary.completed_count == 1
    assert summary.percent == 50


def test_rejected_only_week_is_neither_completed_nor_verified():
    summary = summarize_progress([{"week": 1, "status": "rejected"}], MODULES)
    assert summary.weeks[0].completed is False
    assert summary.weeks[0].verified is False


def test_unpublished_and_unknown_weeks_are_ignored():
    proofs = [{"week": 3, "status": "verified"}, {"week": 9, "status": "verified"}, {"week": None}]
    summary = summarize_progress(proofs, MODULES)
    assert summary.completed_count == 0
    assert [w.week_number for w in summary.weeks] == [1, 2]


def test_as_dict_shape():
    body = summarize_progress([{"week": 1, "status": "verified"}], MODULES).as_dict()
    assert body["completedCount"] == 1
    assert body["totalCount"] == 2
    assert body["percent"] == 50
    assert body["weeks"][0] == {
        "weekNumber": 1,
        "title": "Basics",
        "completed": True,
        "verified": True,
        "latestStatus": "verified",
    }


def test_percent_rounds_half_up():
    modules = [{"week_number": n, "title": f"W{n}", "is_published": True} for n in (1, 2, 3)]
    two_of_three = summarize_progress(
        [{"week": 1, "status": "verified"}, {"week": 2, "status": "verified"}], modules
    )
    one_of_three = summarize_progress([{"week": 1, "status": "verified"}], modules)
    assert two_of_three.percent == 67
    assert one_of_three.percent == 33


def test_unknown_status_reads_as_unverified_submission():
    summary = summarize_progress([{"week": 1, "status": "bogus"}], MODULES)
    week1 = summary.weeks[0]
    assert week1.completed is True
    assert week1.verified is False
    assert week1.latest_status == "pending"
