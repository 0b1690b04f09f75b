"""Timesheet capture at check-out: the 10-slot form and per-entry hours."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Sequence

from ..common.datetime_utils import parse_clock_time
from ..common.validators import optional_text
from ..core.constants import TIMESHEET_SLOTS
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class TimesheetEntryInput:
    """One slot as typed into the check-out form (raw strings)."""

    from_time: str = ""
    to_time: str = ""
    description: str = ""

    @property
    def is_filled(self) -> bool:
        return bool((self.from_time or "").strip()) and bool((self.to_time or "").strip())

    @classmethod
    def from_dict(cls, data: dict) -> "TimesheetEntryInput":
        return cls(
            from_time=str(data.get("from_time") or ""),
            to_time=str(data.get("to_time") or ""),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class TimesheetEntryDraft:
    entry_number: int
    from_time: time
    to_time: time
    description: Optional[str]
    hours: float


@dataclass(frozen=True)
class CheckoutForm:
    check_in_time: Optional[datetime]
    out_time: datetime
    slots: List[TimesheetEntryInput] = field(default_factory=lambda: blank_slots())

    def to_dict(self) -> dict:
        return {
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "out_time": self.out_time.isoformat(),
            "slots": [
                {"entry_number": i + 1, "from_time": s.from_time, "to_time": s.to_time, "description": s.description}
                for i, s in enumerate(self.slots)
            ],
        }


def blank_slots() -> List[TimesheetEntryInput]:
    return [TimesheetEntryInput() for _ in range(TIMESHEET_SLOTS)]


def entry_hours(from_time: time, to_time: time) -> float:
    """Hours covered by one entry; a ``to`` at or before ``from`` runs past midnight."""

    anchor = date(2000, 1, 1)
    start = datetime.combine(anchor, from_time)
    end = datetime.combine(anchor, to_time)
    if end <= start:
        end += timedelta(days=1)
    return max(0.0, round((end - start).total_seconds() / 3600, 4))


def has_filled_entry(entries: Sequence[TimesheetEntryInput]) -> bool:
    return any(e.is_filled for e in entries)


def build_entries(entries: Sequence[TimesheetEntryInput]) -> List[TimesheetEntryDraft]:
    """Validate the submitted slots and keep only the fully-filled ones.

    Slot numbers are the 1-based positions in the form, so gaps are kept.
    """

    if len(entries) > TIMESHEET_SLOTS:
        raise ValidationError(f"At most {TIMESHEET_SLOTS} timesheet entries are allowed")
    if not has_filled_entry(entries):
        raise ValidationError("Please fill at least one timesheet entry before checking out")

    drafts: List[TimesheetEntryDraft] = []
    for index, entry in enumerate(entries):
        if not entry.is_filled:
            continue
        from_t = parse_clock_time(entry.from_time)
        to_t = parse_clock_time(entry.to_time)
        drafts.append(
            TimesheetEntryDraft(
                entry_number=index + 1,
                from_time=from_t,
                to_time=to_t,
                description=optional_text(entry.description),
                hours=entry_hours(from_t, to_t),
            )
        )
    return drafts
