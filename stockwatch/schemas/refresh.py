from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from stockwatch.schemas.quote import Quote

TaskState = Literal["IDLE", "FETCHING", "DELIVERING", "FAILED"]


class EntryOutcome(BaseModel):
    index: int
    ticker: str
    ok: bool
    quote: Quote | None = None
    error: str | None = None


class RefreshSummary(BaseModel):
    target_count: int
    refreshed_count: int
    failed_tickers: list[str]

    @property
    def stale_count(self) -> int:
        return self.target_count - self.refreshed_count


class TaskOutcome(BaseModel):
    kind: str
    state: TaskState
    error: str | None = None
    started_at: float
    finished_at: float | None = None
