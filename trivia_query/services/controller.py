from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ..config import Settings
from ..schemas.trivia import TriviaQueryOptions, TriviaResponse
from .cache import TriviaCache
from .metrics import RequestMetrics
from .query_key import build_query_key
from .storage import default_session_storage
from .trivia_client import TriviaApiClient, TriviaHttpError


LOGGER = logging.getLogger(__name__)


class RequestPhase(str, Enum):
    IDLE = "idle"
    DISABLED = "disabled"
    CACHE_CHECK = "cache_check"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RequestState:
    data: Optional[TriviaResponse] = None
    is_loading: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class TriviaQueryResult:
    data: Optional[TriviaResponse]
    is_loading: bool
    error: Optional[str]
    refetch: Callable[[], None]


@dataclass
class QuerySession:
    id: int
    query_key: str
    difficulty: str
    bypass_cache: bool
    task: Optional["asyncio.Task[None]"] = None
    cancelled: bool = False

    def cancel(self) -> bool:
        """Signal the in-flight fetch to abort. Returns True if one was pending."""
        self.cancelled = True
        if self.task is not None and not self.task.done():
            self.task.cancel()
            return True
        return False


StateListener = Callable[[RequestState], None]


class TriviaQueryController:
    """Drives the fetch lifecycle of one trivia page query.

    A session starts on `mount()`, on every `update()` that changes `enabled`
    or the derived query key, and on every `refetch()`. Starting a session
    cancels the previous one first, so only the newest session can publish
    state. Fetches run as asyncio tasks; the methods that may start a fetch
    must be called with an event loop running.
    """

    def __init__(
        self,
        client: TriviaApiClient,
        cache: Optional[TriviaCache] = None,
        metrics: Optional[RequestMetrics] = None,
        sticky_bypass: bool = True,
        owns_client: bool = False,
        **options: object,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else TriviaCache(default_session_storage())
        self.metrics = metrics
        self.sticky_bypass = sticky_bypass
        self.options = TriviaQueryOptions(**options)
        self._owns_client = owns_client
        # Fixed at construction; later changes to `enabled` do not recompute it.
        self._state = RequestState(is_loading=self.options.enabled)
        self._phase = RequestPhase.IDLE
        self._refetch_count = 0
        self._last_session_refetch_count = 0
        self._session: Optional[QuerySession] = None
        self._session_inputs: Optional[Tuple[bool, str]] = None
        self._session_ids = itertools.count(1)
        self._listeners: List[StateListener] = []
        self._mounted = False
        self._disposed = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cache: Optional[TriviaCache] = None,
        metrics: Optional[RequestMetrics] = None,
        **options: object,
    ) -> "TriviaQueryController":
        client = TriviaApiClient(base_url=settings.api_base_url, path=settings.api_path)
        return cls(
            client,
            cache=cache,
            metrics=metrics,
            sticky_bypass=settings.sticky_bypass,
            owns_client=True,
            **options,
        )

    @property
    def query_key(self) -> str:
        return build_query_key(self.options.difficulty, self.options.offset, self.options.limit)

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def phase(self) -> RequestPhase:
        return self._phase

    @property
    def refetch_count(self) -> int:
        return self._refetch_count

    @property
    def result(self) -> TriviaQueryResult:
        return TriviaQueryResult(
            data=self._state.data,
            is_loading=self._state.is_loading,
            error=self._state.error,
            refetch=self.refetch,
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def mount(self) -> None:
        if self._disposed:
            raise RuntimeError("Controller has been disposed.")
        if self._mounted:
            return
        self._mounted = True
        self._start_session()

    def update(self, **changes: object) -> None:
        self.options = TriviaQueryOptions(**{**self.options.model_dump(), **changes})
        if self._mounted and (self.options.enabled, self.query_key) != self._session_inputs:
            self._start_session()

    def refetch(self) -> None:
        self._refetch_count += 1
        if self._mounted:
            self._start_session()

    def dispose(self) -> None:
        self._mounted = False
        self._disposed = True
        self._teardown()

    async def wait_until_settled(self) -> RequestState:
        """Wait until no fetch is in flight, following any session that supersedes the awaited one."""
        while True:
            session = self._session
            task = session.task if session else None
            if task is None or task.done():
                return self._state
            await asyncio.wait({task})

    async def aclose(self) -> None:
        session = self._session
        self.dispose()
        if session is not None and session.task is not None:
            await asyncio.wait({session.task})
        if self._owns_client:
            await self.client.aclose()

    def _should_bypass(self) -> bool:
        if self.sticky_bypass:
            return self._refetch_count > 0
        return self._refetch_count != self._last_session_refetch_count

    def _teardown(self) -> None:
        session = self._session
        if session is None:
            return
        if session.cancel():
            self._phase = RequestPhase.CANCELLED
            self._record(session, "cancelled")
            LOGGER.debug("trivia_session id=%s key=%s cancelled=True", session.id, session.query_key)

    def _start_session(self) -> None:
        self._teardown()

        query_key = self.query_key
        session = QuerySession(
            id=next(self._session_ids),
            query_key=query_key,
            difficulty=self.options.difficulty.value,
            bypass_cache=self._should_bypass(),
        )
        self._last_session_refetch_count = self._refetch_count
        self._session_inputs = (self.options.enabled, query_key)
        self._session = session

        if not self.options.enabled:
            self._phase = RequestPhase.DISABLED
            LOGGER.debug("trivia_session id=%s key=%s disabled=True", session.id, query_key)
            return

        if not session.bypass_cache:
            self._phase = RequestPhase.CACHE_CHECK
            cached = self.cache.read(query_key)
            if cached is not None:
                self._record(session, "cache_hit")
                self._phase = RequestPhase.SUCCESS
                self._publish(session, data=cached, is_loading=False, error=None)
                LOGGER.info("trivia_session id=%s key=%s source=cache", session.id, query_key)
                return
            self._record(session, "cache_miss")

        self._phase = RequestPhase.LOADING
        self._publish(session, is_loading=True, error=None)
        session.task = asyncio.create_task(self._load(session))

    async def _load(self, session: QuerySession) -> None:
        try:
            response = await self.client.fetch(session.query_key)
        except TriviaHttpError as exc:
            self._fail(session, exc, "http_error")
            return
        except Exception as exc:
            self._fail(session, exc, "transport_error")
            return

        if not self._is_current(session):
            LOGGER.debug("trivia_session id=%s key=%s stale_response=True", session.id, session.query_key)
            return
        self.cache.write(session.query_key, response)
        self._record(session, "fetch_success")
        self._phase = RequestPhase.SUCCESS
        self._publish(session, data=response, is_loading=False, error=None)
        LOGGER.info(
            "trivia_session id=%s key=%s source=network bypass_cache=%s items=%s",
            session.id,
            session.query_key,
            session.bypass_cache,
            len(response.items),
        )

    def _fail(self, session: QuerySession, exc: Exception, outcome: str) -> None:
        if not self._is_current(session):
            return
        message = str(exc) or exc.__class__.__name__
        self._record(session, outcome)
        self._phase = RequestPhase.ERROR
        self._publish(session, is_loading=False, error=message)
        LOGGER.info("trivia_session id=%s key=%s outcome=%s error=%s", session.id, session.query_key, outcome, message)

    def _is_current(self, session: QuerySession) -> bool:
        return session is self._session and not session.cancelled

    def _publish(self, session: QuerySession, **changes: object) -> None:
        if session is not self._session:
            return
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    def _record(self, session: QuerySession, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.record(session.difficulty, outcome)
