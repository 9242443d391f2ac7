import pytest

from trivia_query.services.metrics import RequestMetrics


def test_metrics_snapshot_groups_by_difficulty():
    metrics = RequestMetrics()
    metrics.record("Easy", "cache_hit")
    metrics.record("easy", "fetch_success")
    metrics.record("hard", "http_error")

    snapshot = metrics.snapshot()
    assert snapshot["grand_total"] == 3
    assert snapshot["per_difficulty"]["easy"] == {
        "total": 2,
        "outcome:cache_hit": 1,
        "outcome:fetch_success": 1,
    }
    assert metrics.count("http_error") == 1


def test_metrics_rejects_unknown_outcome():
    with pytest.raises(ValueError):
        RequestMetrics().record("easy", "teleported")


def test_metrics_reset():
    metrics = RequestMetrics()
    metrics.record("all", "cancelled")
    metrics.reset()
    assert metrics.snapshot() == {"grand_total": 0, "per_difficulty": {}}
