"""Position engine: calendar time <-> vertical pixel offset.

Pure functions. All pixel values are relative to the top of a whole
column (the opening hour row), not to an individual hour cell, so a card
may span several rows.

Times outside the calendar window are not clamped: they produce a negative
`top` or a card that overflows the last row, and the rendering surface
clips them.
"""
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple

from salon_calendar.config import (
    CALENDAR_START_HOUR,
    LAYOUT,
    LONE_CARD_WIDTH,
    MIN_CARD_HEIGHT,
    QUARTER_MINUTES,
    SLOTS_PER_HOUR,
    TOTAL_HOURS,
)
from salon_calendar.timemodel import format_time_to_string, parse_time


class CardPosition(NamedTuple):
    """Vertical placement of an appointment card in pixels."""
    top: float
    height: float


def calculate_appointment_position(
    time_str: str,
    duration: int,
    cell_height: float
) -> CardPosition:
    """
    Map an appointment's start and duration onto the column.

    Args:
        time_str: Start time, "H:MM AM|PM"
        duration: Duration in minutes
        cell_height: Pixels per hour

    Returns:
        CardPosition(top, height)

    Example:
        >>> calculate_appointment_position("9:30 AM", 30, 100)
        CardPosition(top=50.0, height=50.0)
    """
    hour, minutes = parse_time(time_str)

    hours_from_start = hour - CALENDAR_START_HOUR
    minute_fraction = minutes / 60

    top = (hours_from_start + minute_fraction) * cell_height
    height = (duration / 60) * cell_height

    return CardPosition(top, height)


def rendered_height(position: CardPosition) -> float:
    """Height actually drawn: short bookings get a legible minimum."""
    return max(MIN_CARD_HEIGHT, position.height)


def renders_cards(hour: int) -> bool:
    """Only the opening-hour row draws cards, so each card is drawn once."""
    return hour == CALENDAR_START_HOUR


# Reverse mapping (cell click -> time)

def quarter_height(cell_height: float) -> float:
    return cell_height / SLOTS_PER_HOUR


def slot_minutes(slot_index: int) -> int:
    """Minutes past the hour for quarter slot 0-3."""
    if not 0 <= slot_index < SLOTS_PER_HOUR:
        raise ValueError(f"Slot index must be 0-{SLOTS_PER_HOUR - 1}, got {slot_index}")
    return slot_index * QUARTER_MINUTES


def slot_at_offset(offset: float, cell_height: float) -> int:
    """
    Find the quarter slot under a click.

    Args:
        offset: Pixels from the top of the hour cell
        cell_height: Pixels per hour

    Returns:
        Slot index 0-3
    """
    if not 0 <= offset < cell_height:
        raise ValueError(f"Offset {offset} is outside a {cell_height}px cell")
    return int(offset // quarter_height(cell_height))


def slot_time(hour: int, slot_index: int) -> str:
    """12-hour time string for a quarter slot of an hour row."""
    return format_time_to_string(hour, slot_minutes(slot_index))


# Side-by-side layout for overlapping cards

@dataclass(frozen=True)
class CardLayout:
    """Horizontal share of a column, as fractions of the column width."""
    appointment: object
    left: float
    width: float


def _span(appointment):
    hour, minutes = parse_time(appointment.time)
    start = hour * 60 + minutes
    return start, start + appointment.duration


def layout_overlaps(appointments: Iterable) -> List[CardLayout]:
    """
    Split a column between overlapping appointments.

    Appointments are sorted by start (longest first on ties) and grouped
    while they keep overlapping the group's running end. Each member of a
    group of n gets 1/n of the width; a card alone keeps a free strip so
    the slot beside it stays clickable.
    """
    ordered = sorted(
        appointments,
        key=lambda apt: (_span(apt)[0], -apt.duration)
    )

    groups = []
    current = []
    group_end = None
    for apt in ordered:
        start, end = _span(apt)
        if current and start < group_end:
            current.append(apt)
            group_end = max(group_end, end)
        else:
            if current:
                groups.append(current)
            current = [apt]
            group_end = end
    if current:
        groups.append(current)

    layouts = []
    for group in groups:
        count = len(group)
        width = LONE_CARD_WIDTH if count == 1 else 1 / count
        for index, apt in enumerate(group):
            layouts.append(CardLayout(apt, left=index / count, width=width))
    return layouts


# Responsive sizing

@dataclass(frozen=True)
class Viewport:
    """Viewport size in pixels, passed in explicitly by the caller."""
    width: int = 1920
    height: int = 1080

    @property
    def device_type(self) -> str:
        return device_type(self.width)

    @property
    def is_mobile(self) -> bool:
        return self.device_type == "mobile"


def device_type(width: int) -> str:
    """Classify a viewport width as mobile, tablet or desktop."""
    if width < LAYOUT["mobile_max_width"]:
        return "mobile"
    if width < LAYOUT["tablet_max_width"]:
        return "tablet"
    return "desktop"


def week_cell_height(viewport: Viewport) -> float:
    """Hour cell height for the week grid: fill the viewport, never below 60px."""
    available = viewport.height - LAYOUT["week_chrome_height"]
    return max(LAYOUT["week_min_cell_height"], available / TOTAL_HOURS)


def staff_cell_height(viewport: Viewport) -> float:
    """Hour cell height for the staff day grid (fixed per device class)."""
    if viewport.is_mobile:
        return LAYOUT["staff_cell_height_mobile"]
    return LAYOUT["staff_cell_height"]
