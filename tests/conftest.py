from typing import Dict, List, Optional

import pytest
from fastapi import FastAPI, HTTPException, Query

from trivia_query.services.cache import TriviaCache
from trivia_query.services.metrics import RequestMetrics
from trivia_query.services.storage import InMemorySessionStorage


QUESTIONS: List[Dict[str, object]] = [
    {
        "question": f"Question {index}?",
        "difficulty": "easy" if index % 2 else "hard",
        "answers": ["alpha", "beta", "gamma", "delta"],
        "correctIndex": index % 4,
    }
    for index in range(40)
]


def make_payload(difficulty: str = "easy", offset: int = 0, limit: Optional[int] = 5) -> Dict[str, object]:
    window = QUESTIONS[offset : offset + (limit if limit is not None else 10)]
    return {
        "difficulty": difficulty,
        "offset": offset,
        "limit": limit,
        "total": len(QUESTIONS),
        "items": window,
    }


def create_stub_app() -> FastAPI:
    app = FastAPI(title="Trivia stub")
    app.state.requests = []

    @app.get("/api/trivia")
    def trivia(
        difficulty: str = "all",
        offset: int = 0,
        limit: Optional[int] = Query(default=None),
    ) -> Dict[str, object]:
        app.state.requests.append({"difficulty": difficulty, "offset": offset, "limit": limit})
        if difficulty == "medium":
            raise HTTPException(status_code=503, detail="Trivia bank offline.")
        return make_payload(difficulty, offset, limit)

    return app


@pytest.fixture
def stub_app() -> FastAPI:
    return create_stub_app()


@pytest.fixture
def storage() -> InMemorySessionStorage:
    return InMemorySessionStorage()


@pytest.fixture
def cache(storage: InMemorySessionStorage) -> TriviaCache:
    return TriviaCache(storage)


@pytest.fixture
def metrics() -> RequestMetrics:
    return RequestMetrics()
