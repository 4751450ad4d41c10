"""Data models for browsing history and the in-memory dataset."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class HistoryEntry:
    """One URL as returned by a provider search."""

    url: str
    title: str = ""
    last_visit_time: int = 0  # epoch-ms
    visit_count: int = 0
    typed_count: int = 0


@dataclass
class VisitEntry:
    """One visit to a URL as returned by a provider visits lookup."""

    visit_id: str
    visit_time: int  # epoch-ms
    referring_visit_id: str = "0"
    transition_type: str = "link"


@dataclass
class VisitRecord:
    """A visit joined with its history entry, plus derived fields."""

    url: str
    domain: str
    short_domain: str
    visit_time: int  # epoch-ms
    date_stamp: str  # MM/DD/YY
    title: str = ""
    visit_id: str = ""
    referring_visit_id: str = "0"
    transition_type: str = ""
    visit_count: int = 0
    typed_count: int = 0
    last_visit_time: int = 0

    # Filled by history.derive.recompute
    dwell_time: float = 0.0  # hours
    visit_time_end: int = 0  # epoch-ms
    visit_start_time: str = ""  # HH:MM
    visit_end_time: str = ""  # HH:MM
    visit_start_time_stamp: str = ""
    visit_end_time_stamp: str = ""

    @classmethod
    def join(
        cls,
        entry: HistoryEntry,
        visit: VisitEntry,
        domain: str,
        short_domain: str,
        date_stamp: str,
    ) -> VisitRecord:
        return cls(
            url=entry.url,
            domain=domain,
            short_domain=short_domain,
            visit_time=visit.visit_time,
            date_stamp=date_stamp,
            title=entry.title,
            visit_id=visit.visit_id,
            referring_visit_id=visit.referring_visit_id,
            transition_type=visit.transition_type,
            visit_count=entry.visit_count,
            typed_count=entry.typed_count,
            last_visit_time=entry.last_visit_time,
        )


@dataclass
class Dataset:
    """Ordered visit records for one analysis session.

    Records are appended by ingest and sorted by ``visit_time`` once a
    refresh completes; aggregate builders only read them.
    """

    records: list[VisitRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[VisitRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> VisitRecord:
        return self.records[index]

    def extend(self, records: list[VisitRecord]) -> None:
        self.records.extend(records)

    def sort(self) -> None:
        self.records.sort(key=lambda r: r.visit_time)

    def start_time(self) -> int | None:
        """``visit_time`` of the earliest record, None when empty."""
        return self.records[0].visit_time if self.records else None

    def end_time(self) -> int | None:
        """``visit_time`` of the latest record, None when empty."""
        return self.records[-1].visit_time if self.records else None
