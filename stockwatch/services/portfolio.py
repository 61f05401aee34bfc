from __future__ import annotations

import threading
from typing import Callable, Iterator

from stockwatch.errors import ParseError, RefreshInProgressError, TransportError
from stockwatch.schemas.quote import Quote
from stockwatch.schemas.refresh import EntryOutcome, RefreshSummary


def collect_outcomes(entries: list[Quote], fetch_one: Callable[[str], Quote]) -> list[EntryOutcome]:
    """Fetch every entry in stored order, one at a time; a failure only marks its own entry."""
    outcomes: list[EntryOutcome] = []
    for index, entry in enumerate(entries):
        try:
            quote = fetch_one(entry.ticker)
        except (TransportError, ParseError) as exc:
            print(
                f"[PORTFOLIO][refresh_entry_error] ticker={entry.ticker} error={exc}",
                flush=True,
            )
            outcomes.append(EntryOutcome(index=index, ticker=entry.ticker, ok=False, error=str(exc)))
            continue
        outcomes.append(EntryOutcome(index=index, ticker=entry.ticker, ok=True, quote=quote))
    return outcomes


class Portfolio:
    """Ordered, caller-owned list of monitored quotes. Duplicate tickers are kept as-is."""

    def __init__(self, tickers: list[str] | None = None) -> None:
        self._lock = threading.Lock()
        self._refresh_token: object | None = None
        self._entries: list[Quote] = []
        self.last_summary: RefreshSummary | None = None
        for ticker in tickers or []:
            self.add(ticker)

    def add(self, ticker: str) -> Quote:
        value = str(ticker).strip()
        if not value:
            raise ValueError("ticker must not be empty")
        placeholder = Quote.placeholder(value)
        with self._lock:
            self._entries.append(placeholder)
        print(f"[PORTFOLIO][add] ticker={value}", flush=True)
        return placeholder

    def remove(self, ticker: str) -> int:
        target = str(ticker).strip().lower()
        with self._lock:
            kept = [q for q in self._entries if q.ticker.lower() != target]
            removed = len(self._entries) - len(kept)
            self._entries = kept
        print(f"[PORTFOLIO][remove] ticker={ticker} removed={removed}", flush=True)
        return removed

    def get(self, ticker: str) -> Quote | None:
        target = str(ticker).strip().lower()
        with self._lock:
            for quote in self._entries:
                if quote.ticker.lower() == target:
                    return quote
        return None

    def quotes(self) -> list[Quote]:
        with self._lock:
            return list(self._entries)

    def tickers(self) -> list[str]:
        return [q.ticker for q in self.quotes()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[Quote]:
        return iter(self.quotes())

    @property
    def refresh_in_progress(self) -> bool:
        return self._refresh_token is not None

    def begin_refresh(self) -> object:
        """Reserve the single-flight slot; the returned token is needed to release it."""
        with self._lock:
            if self._refresh_token is not None:
                raise RefreshInProgressError("REFRESH_IN_PROGRESS")
            token = object()
            self._refresh_token = token
        return token

    def end_refresh(self, token: object) -> bool:
        # may be released from the worker thread that ran the refresh
        with self._lock:
            if token is None or self._refresh_token is not token:
                return False
            self._refresh_token = None
        return True

    def apply_outcomes(self, outcomes: list[EntryOutcome]) -> int:
        applied = 0
        with self._lock:
            for outcome in outcomes:
                if not outcome.ok or outcome.quote is None:
                    continue
                if outcome.index >= len(self._entries) or self._entries[outcome.index].ticker != outcome.ticker:
                    print(
                        f"[PORTFOLIO][apply_skip] ticker={outcome.ticker} index={outcome.index} reason=slot_changed",
                        flush=True,
                    )
                    continue
                self._entries[outcome.index] = outcome.quote
                applied += 1
        return applied

    def run_refresh(self, fetch_one: Callable[[str], Quote]) -> RefreshSummary:
        """Refresh with the single-flight slot already held by the caller."""
        entries = self.quotes()
        outcomes = collect_outcomes(entries, fetch_one)
        applied = self.apply_outcomes(outcomes)
        summary = RefreshSummary(
            target_count=len(entries),
            refreshed_count=applied,
            failed_tickers=[o.ticker for o in outcomes if not o.ok],
        )
        self.last_summary = summary
        print(
            "[PORTFOLIO][refresh_done] "
            f"target_count={summary.target_count} refreshed_count={summary.refreshed_count} "
            f"stale_count={summary.stale_count}",
            flush=True,
        )
        return summary

    def refresh(self, fetch_one: Callable[[str], Quote]) -> RefreshSummary:
        token = self.begin_refresh()
        try:
            return self.run_refresh(fetch_one)
        finally:
            self.end_refresh(token)
