from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    ALL = "all"


QuestionDifficulty = Literal["easy", "medium", "hard"]


class TriviaQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(..., description="Question text shown to the player.")
    difficulty: Optional[QuestionDifficulty] = Field(default=None)
    answers: List[str] = Field(
        ...,
        description="Answer options; the order defines answer positions.",
    )
    correct_index: int = Field(
        ...,
        alias="correctIndex",
        description="Position of the correct option inside `answers`.",
    )

    @property
    def correct_answer(self) -> str:
        return self.answers[self.correct_index]


class TriviaResponse(BaseModel):
    difficulty: Difficulty = Field(..., description="Difficulty filter the page was served for.")
    offset: int = Field(..., description="Index of the first item in the full result set.")
    limit: Optional[int] = Field(
        default=None,
        description="Requested page size; null when the server default applied.",
    )
    total: int = Field(..., description="Number of matching questions server-side.")
    items: List[TriviaQuestion] = Field(default_factory=list)


class TriviaQueryOptions(BaseModel):
    difficulty: Difficulty = Field(default=Difficulty.ALL)
    offset: int = Field(default=0, ge=0)
    limit: Optional[int] = Field(
        default=None,
        ge=0,
        description="Page size. Left out of the request when unset so the server decides.",
    )
    enabled: bool = Field(default=True, description="When false no cache read or fetch happens.")
