"""Navigation state machine for the calendar views.

Views:
- WEEK_GRID: one column per weekday, anchored at a Monday
- DAY_STAFF_GRID: one column per staff member, anchored at a single day
- ALL_APPOINTMENTS: filterable list of every loaded appointment

The navigator is the only owner of "what is being looked at". It is
long-lived: there is no terminal state.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from salon_calendar.errors import InvalidTransition
from salon_calendar.logging_config import get_logger
from salon_calendar.models import Appointment, AppointmentStatus
from salon_calendar.timemodel import (
    as_date,
    get_week_dates,
    get_week_start,
    minutes_since_midnight,
    navigate_week,
    parse_date,
)

logger = get_logger(__name__)


class ViewMode(str, Enum):
    """Calendar view modes."""
    WEEK_GRID = "week_grid"
    DAY_STAFF_GRID = "day_staff_grid"
    ALL_APPOINTMENTS = "all_appointments"


GRID_MODES = (ViewMode.WEEK_GRID, ViewMode.DAY_STAFF_GRID)


# Pattern: Current view -> [allowed next views]
VALID_TRANSITIONS: Dict[ViewMode, List[ViewMode]] = {
    ViewMode.WEEK_GRID: [
        ViewMode.WEEK_GRID,  # previous / next / select_date
        ViewMode.DAY_STAFF_GRID,
        ViewMode.ALL_APPOINTMENTS,
    ],
    ViewMode.DAY_STAFF_GRID: [
        ViewMode.DAY_STAFF_GRID,
        ViewMode.WEEK_GRID,
        ViewMode.ALL_APPOINTMENTS,
    ],
    ViewMode.ALL_APPOINTMENTS: [
        # Back to whichever grid was last active
        ViewMode.WEEK_GRID,
        ViewMode.DAY_STAFF_GRID,
    ],
}


def validate_transition(current: ViewMode, intended: ViewMode) -> bool:
    """
    Validate a view transition.

    Example:
        >>> validate_transition(ViewMode.ALL_APPOINTMENTS, ViewMode.ALL_APPOINTMENTS)
        False
    """
    return intended in VALID_TRANSITIONS.get(current, [])


@dataclass
class ListFilters:
    """
    Filters of the all-appointments list.

    They survive toggling between the list and the grid; only clear()
    resets them. Sort order is not a filter and is kept by clear().
    """
    status: Optional[AppointmentStatus] = None  # None = all statuses
    date_from: str = ""
    date_to: str = ""
    sort_by: str = "date"

    def __post_init__(self):
        if self.sort_by not in ("date", "status"):
            raise ValueError(f"sort_by must be 'date' or 'status', got '{self.sort_by}'")
        for bound in (self.date_from, self.date_to):
            if bound:
                parse_date(bound)

    @property
    def is_active(self) -> bool:
        return bool(self.status is not None or self.date_from or self.date_to)

    def clear(self):
        self.status = None
        self.date_from = ""
        self.date_to = ""


def filter_appointments(
    appointments: Iterable[Appointment],
    filters: ListFilters
) -> List[Appointment]:
    """
    Apply list filters and sort.

    Date bounds are inclusive. "date" sorting is chronological (date, then
    start time); "status" sorting is alphabetical by status value.
    """
    result = list(appointments)

    if filters.status is not None:
        result = [apt for apt in result if apt.status == filters.status]
    # ISO dates compare correctly as strings
    if filters.date_from:
        result = [apt for apt in result if apt.date >= filters.date_from]
    if filters.date_to:
        result = [apt for apt in result if apt.date <= filters.date_to]

    if filters.sort_by == "date":
        result.sort(key=lambda apt: (apt.date, minutes_since_midnight(apt.time)))
    else:
        result.sort(key=lambda apt: apt.status.value)

    return result


def status_counts(appointments: Iterable[Appointment]) -> Dict[str, int]:
    """Totals per status plus "total", for the list summary tiles."""
    counts = {status.value: 0 for status in AppointmentStatus}
    total = 0
    for apt in appointments:
        counts[apt.status.value] += 1
        total += 1
    counts["total"] = total
    return counts


class CalendarNavigator:
    """
    Tracks the viewed week/day and the active view mode.

    Both grid anchors are kept: `week_start` for the week grid and
    `selected_date` for the staff day grid. The list view remembers the
    grid it was entered from.
    """

    def __init__(
        self,
        today: Optional[date] = None,
        mode: ViewMode = ViewMode.WEEK_GRID
    ):
        """
        Initialize at the current date.

        Args:
            today: Override for the current date (tests, fixed clocks)
            mode: Initial grid mode
        """
        if mode not in GRID_MODES:
            raise ValueError(f"Initial mode must be a grid view, got {mode}")

        today = as_date(today) if today is not None else date.today()
        self.selected_date = today
        self.week_start = get_week_start(today)
        self.filters = ListFilters()
        self._grid_mode = mode
        self._show_all = False

    @property
    def mode(self) -> ViewMode:
        if self._show_all:
            return ViewMode.ALL_APPOINTMENTS
        return self._grid_mode

    @property
    def grid_mode(self) -> ViewMode:
        """Grid view that is (or was last) active."""
        return self._grid_mode

    @property
    def anchor(self) -> Optional[date]:
        """Anchor date of the current view (None for the list)."""
        if self.mode == ViewMode.WEEK_GRID:
            return self.week_start
        if self.mode == ViewMode.DAY_STAFF_GRID:
            return self.selected_date
        return None

    def _transition(self, intended: ViewMode):
        current = self.mode
        if not validate_transition(current, intended):
            raise InvalidTransition(
                f"Cannot go from {current.value} to {intended.value}"
            )
        logger.debug("view_transition", current=current.value, intended=intended.value)

    def _step(self, direction: int):
        self._transition(self.mode)
        if self.mode == ViewMode.WEEK_GRID:
            self.week_start = navigate_week(self.week_start, direction)
        else:
            self.selected_date = self.selected_date + timedelta(days=direction)

    def previous(self):
        """Go back one week (week grid) or one day (day grid)."""
        self._step(-1)

    def next(self):
        """Go forward one week (week grid) or one day (day grid)."""
        self._step(1)

    def select_date(self, value: date):
        """Jump to a date, re-entering the last active grid view."""
        target = as_date(value)
        self._transition(self._grid_mode)
        self._show_all = False
        self.selected_date = target
        self.week_start = get_week_start(target)

    def switch_grid(self, mode: ViewMode):
        """
        Change between the week grid and the staff day grid.

        Switching to the week grid shows the week of the selected day;
        switching to the day grid keeps the selected day if it is inside the
        viewed week, otherwise uses the week's Monday.
        """
        if mode not in GRID_MODES:
            raise InvalidTransition(f"{mode} is not a grid view")
        self._transition(mode)

        if mode == ViewMode.WEEK_GRID:
            self.week_start = get_week_start(self.selected_date)
        elif self.selected_date not in get_week_dates(self.week_start):
            self.selected_date = self.week_start

        self._grid_mode = mode
        self._show_all = False

    def toggle_all_appointments(self):
        """Flip between the list and the last active grid. Filters are kept."""
        intended = self._grid_mode if self._show_all else ViewMode.ALL_APPOINTMENTS
        self._transition(intended)
        self._show_all = not self._show_all

    def clear_filters(self):
        self.filters.clear()

    def view_key(self) -> Tuple[str, Optional[str]]:
        """Hashable tag of the current view (used to spot stale fetches)."""
        anchor = self.anchor
        return (self.mode.value, anchor.isoformat() if anchor else None)

    def visible_range(self) -> Optional[Tuple[date, date]]:
        """Inclusive date range the current view shows (None = unbounded list)."""
        if self.mode == ViewMode.WEEK_GRID:
            return (self.week_start, self.week_start + timedelta(days=6))
        if self.mode == ViewMode.DAY_STAFF_GRID:
            return (self.selected_date, self.selected_date)
        return None
