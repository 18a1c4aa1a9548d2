"""
Tests for the rescoring reproducibility check
"""
from offloading.core.scoring import score_response
from offloading.models.task_result import TaskResult
from scripts.rescore_results import rescore


def _stored(response, correct, **overrides):
    scored = score_response(response, correct, "en")
    fields = dict(
        experiment_id="e1",
        locale="en",
        response_raw=response,
        correct_raw=correct,
        response_normalized=scored.normalized_response,
        correct_normalized=scored.normalized_correct,
        edit_distance=scored.edit_distance,
        similarity=scored.similarity,
    )
    fields.update(overrides)
    return TaskResult(**fields)


def test_consistent_rows_pass(session):
    session.add(_stored("compter", "computer"))
    session.add(_stored("Memory", "memory"))
    session.commit()
    assert rescore(session) == []


def test_drifted_row_is_reported_and_fixed(session):
    session.add(_stored("compter", "computer", edit_distance=3, similarity=0.5))
    session.commit()

    mismatches = rescore(session)
    assert len(mismatches) == 1
    assert mismatches[0]["recomputed"] == (1, 0.875)

    rescore(session, fix=True)
    assert rescore(session) == []


def test_filter_by_experiment(session):
    session.add(_stored("compter", "computer", experiment_id="other", edit_distance=9))
    session.commit()
    assert rescore(session, experiment_id="e1") == []


def test_uses_cap_recorded_at_submission(session, monkeypatch):
    from offloading.core.settings import settings

    # scored under a 5 character cap, rescored after the cap went up
    session.add(_stored("abcde", "abcde", response_raw="abcdefgh", metadata_={"max_scored_chars": 5}))
    session.commit()
    monkeypatch.setattr(settings, "MAX_SCORED_CHARS", 500)
    assert rescore(session) == []


def test_correct_normalized_drift_is_reported(session):
    session.add(_stored("compter", "computer", correct_normalized="Computer"))
    session.commit()
    assert [m["recomputed"] for m in rescore(session)] == [(1, 0.875)]


def test_sanitized_rows_are_skipped(session):
    session.add(_stored("?abc", "abc", response_normalized="", edit_distance=3, similarity=0.0,
                        metadata_={"unicode_replaced": True}))
    session.commit()
    assert rescore(session) == []
