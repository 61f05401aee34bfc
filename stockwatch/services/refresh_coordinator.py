from __future__ import annotations

import threading
import time
from concurrent.futures import Future
from typing import Any, Callable

from stockwatch.errors import NetworkUnavailableError, StockwatchError
from stockwatch.integrations.connectivity import is_network_available
from stockwatch.schemas.refresh import TaskOutcome, TaskState
from stockwatch.services.market_data import MarketDataService
from stockwatch.services.portfolio import Portfolio


class RefreshTask:
    """One background operation with exactly one terminal delivery.

    ``on_complete`` receives the task itself once its future is resolved, so
    ``task.result()`` never blocks inside the callback. Callers that lose
    interest can drop the task; nothing waits on it.
    """

    def __init__(self, kind: str, on_complete: Callable[["RefreshTask"], Any] | None = None) -> None:
        self.kind = kind
        self.state: TaskState = "IDLE"
        self.error: str | None = None
        self.started_at = time.time()
        self.finished_at: float | None = None
        self._future: Future = Future()
        self._on_complete = on_complete

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: float | None = None) -> Any:
        return self._future.result(timeout=timeout)

    def exception(self, timeout: float | None = None) -> BaseException | None:
        return self._future.exception(timeout=timeout)

    @property
    def outcome(self) -> TaskOutcome:
        return TaskOutcome(
            kind=self.kind,
            state=self.state,
            error=self.error,
            started_at=self.started_at,
            finished_at=self.finished_at,
        )

    def run(self, work: Callable[[], Any]) -> None:
        self.state = "FETCHING"
        try:
            value = work()
        except Exception as exc:
            self.state = "FAILED"
            self.error = str(exc)
            self.finished_at = time.time()
            print(f"[TASK][failed] kind={self.kind} error={exc}", flush=True)
            self._future.set_exception(exc)
        else:
            self.state = "DELIVERING"
            self.finished_at = time.time()
            print(
                f"[TASK][delivered] kind={self.kind} elapsed_sec={self.finished_at - self.started_at:.3f}",
                flush=True,
            )
            self._future.set_result(value)
        self._deliver()

    def _deliver(self) -> None:
        if self._on_complete is None:
            return
        try:
            self._on_complete(self)
        except Exception as exc:
            print(f"[TASK][callback_error] kind={self.kind} error={exc}", flush=True)


class RefreshCoordinator:
    """Runs portfolio refreshes and single fetches off the calling thread."""

    def __init__(
        self,
        *,
        service: MarketDataService | None = None,
        network_checker: Callable[[], bool] | None = None,
    ) -> None:
        self.service = service or MarketDataService()
        self.network_checker = network_checker or is_network_available
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()

    def _ensure_network(self, kind: str) -> None:
        # runs inside the worker; the probe may block on DNS and connect
        if not self.network_checker():
            print(f"[TASK][network_unavailable] kind={kind}", flush=True)
            raise NetworkUnavailableError("NETWORK_UNAVAILABLE")

    def _start(
        self,
        kind: str,
        work: Callable[[], Any],
        on_complete: Callable[[RefreshTask], Any] | None,
    ) -> RefreshTask:
        task = RefreshTask(kind, on_complete)
        worker = threading.Thread(target=task.run, args=(work,), daemon=True, name=f"stockwatch-{kind}")
        print(f"[TASK][start] kind={kind} thread={worker.name}", flush=True)
        worker.start()
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(worker)
        return task

    def refresh_portfolio(
        self,
        portfolio: Portfolio,
        on_complete: Callable[[RefreshTask], Any] | None = None,
    ) -> RefreshTask:
        if not isinstance(portfolio, Portfolio):
            print(f"[TASK][invalid_portfolio] type={type(portfolio).__name__}", flush=True)

            def reject() -> Portfolio:
                raise StockwatchError("INVALID_PORTFOLIO")

            return self._start("portfolio", reject, on_complete)

        token = portfolio.begin_refresh()

        def work() -> Portfolio:
            try:
                self._ensure_network("portfolio")
                portfolio.run_refresh(self.service.fetch_quote)
            finally:
                portfolio.end_refresh(token)
            return portfolio

        try:
            return self._start("portfolio", work, on_complete)
        except RuntimeError:
            portfolio.end_refresh(token)
            raise

    def _fetch_online(self, kind: str, fetch: Callable[[], Any]) -> Callable[[], Any]:
        def work() -> Any:
            self._ensure_network(kind)
            return fetch()

        return work

    def fetch_feed(
        self,
        ticker: str,
        on_complete: Callable[[RefreshTask], Any] | None = None,
    ) -> RefreshTask:
        work = self._fetch_online("feed", lambda: self.service.fetch_feed(ticker))
        return self._start("feed", work, on_complete)

    def search_tickers(
        self,
        query: str,
        on_complete: Callable[[RefreshTask], Any] | None = None,
    ) -> RefreshTask:
        work = self._fetch_online("search", lambda: self.service.search_tickers(query))
        return self._start("search", work, on_complete)

    def fetch_chart(
        self,
        ticker: str,
        span: str | None = None,
        on_complete: Callable[[RefreshTask], Any] | None = None,
    ) -> RefreshTask:
        work = self._fetch_online("chart", lambda: self.service.fetch_chart(ticker, span))
        return self._start("chart", work, on_complete)

    def wait_idle(self, timeout: float | None = None) -> bool:
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._lock:
            threads = list(self._threads)
        for worker in threads:
            remaining = None if deadline is None else max(deadline - time.monotonic(), 0.0)
            worker.join(timeout=remaining)
        return not any(t.is_alive() for t in threads)
