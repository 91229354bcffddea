# ties resolver -> client -> view state together.
# geolocation and http run on a ThreadPoolExecutor so the caller never blocks.
# every start/submit takes a new token; a completion only lands if its token is still the latest

from __future__ import annotations
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional
from .client import WeatherAPIClient
from .location import LocationError, LocationResolver
from .models import ErrorKind, Query, RetrievalError
from .service import retrieve
from .state import Failed, Idle, Loading, ViewState, from_outcome

logger = logging.getLogger(__name__)

Listener = Callable[[ViewState], None]


def _report_crash(future: Future) -> None:
    # expected failures are already state; anything raised here is a bug worth seeing
    if not future.cancelled() and future.exception() is not None:
        logger.error("weather task crashed", exc_info=future.exception())


class WeatherWidget:
    def __init__(
        self,
        client: WeatherAPIClient,
        resolver: LocationResolver,
        on_change: Optional[Listener] = None,
        max_workers: int = 2,
    ):
        self.client = client
        self.resolver = resolver
        self.on_change = on_change

        self._lock = threading.RLock()
        self._state: ViewState = Idle()
        self._token = 0
        self._closed = False
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="weather")

    @property
    def state(self) -> ViewState:
        with self._lock:
            return self._state

    def start(self) -> Future:
        # page-load path: try the device position, fall back to waiting for input
        token = self._begin()
        return self._track(self._pool.submit(self._locate, token))

    def submit(self, text: str) -> Optional[Future]:
        # manual search supersedes whatever is in flight, empty text is a no-op
        query = self.resolver.from_text(text)
        if query is None:
            return None
        token = self._begin()
        return self._track(self._pool.submit(self._retrieve, token, query))

    def close(self) -> None:
        # completions that arrive after this are dropped
        with self._lock:
            self._closed = True
        self._pool.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "WeatherWidget":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _track(self, future: Future) -> Future:
        future.add_done_callback(_report_crash)
        return future

    def _begin(self) -> int:
        with self._lock:
            if self._closed:
                raise RuntimeError("widget is closed")
            self._token += 1
            token = self._token
        self._apply(token, Loading())
        return token

    def _is_current(self, token: int) -> bool:
        with self._lock:
            return not self._closed and token == self._token

    def _locate(self, token: int) -> None:
        try:
            query = self.resolver.locate()
        except LocationError as exc:
            logger.info("geolocation failed (%s): %s", exc.kind.value, exc)
            self._apply(token, Failed(RetrievalError(kind=exc.kind, detail=str(exc))))
            return
        except Exception as exc:
            # a misbehaving provider still has to take the view out of Loading
            self._fail(token, ErrorKind.LOCATION_DENIED, exc)
            raise

        # a manual search may have started while we waited on the platform
        if not self._is_current(token):
            logger.debug("dropping stale position %s", query.serialize())
            return
        self._retrieve(token, query)

    def _retrieve(self, token: int, query: Query) -> None:
        try:
            outcome = retrieve(self.client, query)
        except Exception as exc:
            self._fail(token, ErrorKind.NETWORK_FAILURE, exc)
            raise
        self._apply(token, from_outcome(outcome))

    def _fail(self, token: int, kind: ErrorKind, exc: Exception) -> None:
        detail = str(exc) or type(exc).__name__
        self._apply(token, Failed(RetrievalError(kind=kind, detail=detail)))

    def _apply(self, token: int, state: ViewState) -> None:
        with self._lock:
            if self._closed or token != self._token:
                logger.debug("discarding result of superseded request %d", token)
                return
            self._state = state
            # notified under the lock so listeners see states in the order they were applied
            if self.on_change is not None:
                self.on_change(state)
