from __future__ import annotations

from collections import defaultdict
from threading import Lock
from typing import Dict

OUTCOMES = (
    "cache_hit",
    "cache_miss",
    "fetch_success",
    "http_error",
    "transport_error",
    "cancelled",
)


class RequestMetrics:
    """Thread-safe counters of request outcomes per difficulty."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._per_difficulty: Dict[str, Dict[str, int]] = defaultdict(lambda: {"total": 0})
        self._grand_total = 0

    def record(self, difficulty: str, outcome: str) -> None:
        normalized_difficulty = difficulty.strip().lower()
        normalized_outcome = outcome.strip().lower()
        if normalized_outcome not in OUTCOMES:
            raise ValueError(f"Unknown request outcome: {outcome}")
        with self._lock:
            entry = self._per_difficulty[normalized_difficulty]
            entry["total"] = entry.get("total", 0) + 1
            outcome_key = f"outcome:{normalized_outcome}"
            entry[outcome_key] = entry.get(outcome_key, 0) + 1
            self._grand_total += 1

    def count(self, outcome: str) -> int:
        outcome_key = f"outcome:{outcome}"
        with self._lock:
            return sum(entry.get(outcome_key, 0) for entry in self._per_difficulty.values())

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            per_difficulty_copy = {
                difficulty: dict(counts)
                for difficulty, counts in self._per_difficulty.items()
            }
            return {
                "grand_total": self._grand_total,
                "per_difficulty": per_difficulty_copy,
            }

    def reset(self) -> None:
        with self._lock:
            self._per_difficulty.clear()
            self._grand_total = 0
