from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Protocol

import numpy as np


class ScheduleCalendar(Protocol):
    def date_at(self, project_start: dt.date, offset_days: float) -> dt.date:
        ...


@dataclass(frozen=True)
class ElapsedDayCalendar:
    """Treats schedule units as raw elapsed days from the project start."""

    def date_at(self, project_start: dt.date, offset_days: float) -> dt.date:
        if offset_days < 0:
            raise ValueError("offset_days must be >= 0")
        return project_start + dt.timedelta(days=math.ceil(offset_days))


@dataclass(frozen=True)
class BusinessDayCalendar:
    """Maps schedule units onto working days, skipping weekends and holidays.

    `weekmask` follows numpy's Monday-first convention ("1111100" is Mon-Fri).
    A project start that falls on a non-working day rolls forward to the next
    working day, which then counts as day 0.
    """

    weekmask: str = "1111100"
    holidays: tuple[dt.date, ...] = ()

    def __post_init__(self) -> None:
        if len(self.weekmask) != 7 or set(self.weekmask) - {"0", "1"}:
            raise ValueError("weekmask must be seven characters of 0/1")
        if "1" not in self.weekmask:
            raise ValueError("weekmask must include at least one working day")

    def date_at(self, project_start: dt.date, offset_days: float) -> dt.date:
        if offset_days < 0:
            raise ValueError("offset_days must be >= 0")
        shifted = np.busday_offset(
            np.datetime64(project_start, "D"),
            math.ceil(offset_days),
            roll="forward",
            weekmask=self.weekmask,
            holidays=self._holiday_array(),
        )
        return shifted.item()

    def working_days_between(self, start: dt.date, end: dt.date) -> int:
        return int(
            np.busday_count(
                np.datetime64(start, "D"),
                np.datetime64(end, "D"),
                weekmask=self.weekmask,
                holidays=self._holiday_array(),
            )
        )

    def _holiday_array(self) -> np.ndarray:
        return np.array([day.isoformat() for day in self.holidays], dtype="datetime64[D]")
