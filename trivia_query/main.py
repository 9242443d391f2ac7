"""Fetch one page of trivia questions through the query controller.

Usage:
    python -m trivia_query.main --difficulty easy --offset 0 --limit 5

The endpoint location comes from TRIVIA_API_BASE_URL / TRIVIA_API_PATH
(a .env file in the working directory is honoured).
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Dict, List, Optional

from dotenv import load_dotenv

from .config import Settings, load_settings
from .schemas.trivia import Difficulty
from .services.cache import TriviaCache
from .services.controller import TriviaQueryController
from .services.metrics import RequestMetrics
from .services.storage import default_session_storage


LOGGER = logging.getLogger("trivia_query")


async def run_query(
    settings: Settings,
    difficulty: Difficulty,
    offset: int,
    limit: Optional[int],
    refetch: bool = False,
) -> Dict[str, object]:
    metrics = RequestMetrics()
    cache = TriviaCache(default_session_storage())
    controller = TriviaQueryController.from_settings(
        settings,
        cache=cache,
        metrics=metrics,
        difficulty=difficulty,
        offset=offset,
        limit=limit,
    )
    try:
        controller.mount()
        await controller.wait_until_settled()
        if refetch:
            controller.refetch()
            await controller.wait_until_settled()
        result = controller.result
    finally:
        await controller.aclose()

    return {
        "query_key": controller.query_key,
        "data": result.data.model_dump(mode="json", by_alias=True) if result.data else None,
        "is_loading": result.is_loading,
        "error": result.error,
        "cache_entries": cache.size(),
        "metrics": metrics.snapshot(),
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch a page of trivia questions.")
    parser.add_argument(
        "--difficulty",
        choices=[difficulty.value for difficulty in Difficulty],
        default=Difficulty.ALL.value,
        help="Difficulty filter (default: all).",
    )
    parser.add_argument("--offset", type=int, default=0, help="Index of the first question.")
    parser.add_argument("--limit", type=int, default=None, help="Page size; server default when omitted.")
    parser.add_argument("--refetch", action="store_true", help="Issue a cache-bypassing refetch after the first load.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)

    args = build_parser().parse_args(argv)
    payload = asyncio.run(
        run_query(
            settings,
            difficulty=Difficulty(args.difficulty),
            offset=args.offset,
            limit=args.limit,
            refetch=args.refetch,
        )
    )
    print(json.dumps(payload, indent=2))
    if payload["error"]:
        LOGGER.error("trivia_query failed key=%s error=%s", payload["query_key"], payload["error"])
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
