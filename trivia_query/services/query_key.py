from __future__ import annotations

from typing import List, Optional, Tuple, Union
from urllib.parse import urlencode

from ..schemas.trivia import Difficulty


def build_query_key(
    difficulty: Union[Difficulty, str, None] = Difficulty.ALL,
    offset: Optional[int] = 0,
    limit: Optional[int] = None,
) -> str:
    """Canonical cache key for a trivia page, also usable as the request query string.

    Parameters are always emitted in the order difficulty, offset, limit and
    ``limit`` is left out entirely when it is not set.
    """
    if difficulty is None:
        difficulty = Difficulty.ALL
    params: List[Tuple[str, str]] = [
        ("difficulty", str(getattr(difficulty, "value", difficulty))),
        ("offset", str(offset or 0)),
    ]
    if limit is not None:
        params.append(("limit", str(limit)))
    return urlencode(params)
