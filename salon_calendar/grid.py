"""Grid composition: columns, hour rows, quarter slots and cards.

Two layouts share the same machinery and only differ in how an appointment
picks its column:
- Week grid: one column per weekday, matched by calendar date
- Staff grid: one column per staff member on one day, matched by the
  appointment's staff name (exact string equality)

Cards are attached to the opening-hour cell of their column only and are
positioned relative to the whole column.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Sequence

from salon_calendar.config import (
    CALENDAR_END_HOUR,
    CALENDAR_START_HOUR,
    QUARTER_MINUTES,
    SLOTS_PER_HOUR,
)
from salon_calendar.logging_config import get_logger
from salon_calendar.models import Appointment, StaffMember
from salon_calendar.navigation import CalendarNavigator, ViewMode
from salon_calendar.position import (
    Viewport,
    calculate_appointment_position,
    layout_overlaps,
    quarter_height,
    renders_cards,
    rendered_height,
    slot_at_offset,
    slot_minutes,
    slot_time,
    staff_cell_height,
    week_cell_height,
)
from salon_calendar.timemodel import (
    format_date_short,
    format_hour_label,
    get_day_name,
    get_week_dates,
    is_appointment_on_date,
    is_today,
    minutes_since_midnight,
)

logger = get_logger(__name__)

HOURS = list(range(CALENDAR_START_HOUR, CALENDAR_END_HOUR))


@dataclass(frozen=True)
class QuarterSlot:
    """Clickable 15-minute target inside an hour cell."""
    index: int
    minutes: int
    time: str
    top: float  # offset inside the hour cell
    height: float


@dataclass(frozen=True)
class RenderedCard:
    """
    Appointment card placed in a column.

    `top`/`height` come straight from the position engine; `draw_height`
    applies the legibility minimum. `left`/`width` are fractions of the
    column width.
    """
    appointment: Appointment
    top: float
    height: float
    draw_height: float
    left: float
    width: float


@dataclass
class HourCell:
    hour: int
    label: str
    slots: List[QuarterSlot]
    cards: List[RenderedCard] = field(default_factory=list)


@dataclass
class GridColumn:
    """One column of the grid (a weekday or a staff member)."""
    title: str
    subtitle: str
    date: date
    cells: List[HourCell]
    staff_id: Optional[str] = None
    staff_name: Optional[str] = None
    highlighted: bool = False

    @property
    def cards(self) -> List[RenderedCard]:
        return [card for cell in self.cells for card in cell.cards]


@dataclass(frozen=True)
class SlotClick:
    """Where a new booking should start after an empty-slot click."""
    date: date
    time: str
    staff_id: Optional[str] = None
    staff_name: Optional[str] = None


@dataclass
class CalendarGrid:
    mode: ViewMode
    columns: List[GridColumn]
    cell_height: float
    hours: List[int] = field(default_factory=lambda: list(HOURS))

    def column(self, index: int) -> GridColumn:
        if not 0 <= index < len(self.columns):
            raise IndexError(f"Column {index} out of range (0-{len(self.columns) - 1})")
        return self.columns[index]

    def click(self, column_index: int, hour: int, slot_index: int) -> SlotClick:
        """
        Route a click on an empty quarter slot.

        Raises:
            ValueError: If the hour is not a row of the grid or the slot is not 0-3
        """
        if hour not in self.hours:
            raise ValueError(f"Hour {hour} is not a row of the grid")
        column = self.column(column_index)
        return SlotClick(
            date=column.date,
            time=slot_time(hour, slot_index),
            staff_id=column.staff_id,
            staff_name=column.staff_name,
        )

    def click_at(self, column_index: int, hour: int, offset: float) -> SlotClick:
        """Route a click given its pixel offset inside the hour cell."""
        return self.click(column_index, hour, slot_at_offset(offset, self.cell_height))

    def card_at(self, column_index: int, appointment_id: int) -> Optional[RenderedCard]:
        for card in self.column(column_index).cards:
            if card.appointment.id == appointment_id:
                return card
        return None


def _build_cells(
    appointments: Sequence[Appointment],
    cell_height: float
) -> List[HourCell]:
    slot_height = quarter_height(cell_height)
    cells = []
    for hour in HOURS:
        slots = [
            QuarterSlot(
                index=i,
                minutes=slot_minutes(i),
                time=slot_time(hour, i),
                top=i * slot_height,
                height=slot_height,
            )
            for i in range(SLOTS_PER_HOUR)
        ]
        cell = HourCell(hour=hour, label=format_hour_label(hour), slots=slots)
        if renders_cards(hour):
            cell.cards = _place_cards(appointments, cell_height)
        cells.append(cell)
    return cells


def _place_cards(
    appointments: Sequence[Appointment],
    cell_height: float
) -> List[RenderedCard]:
    cards = []
    for layout in layout_overlaps(appointments):
        apt = layout.appointment
        position = calculate_appointment_position(apt.time, apt.duration, cell_height)
        if position.top < 0 or position.top + position.height > cell_height * len(HOURS):
            logger.debug("card_outside_window", appointment_id=apt.id, time=apt.time)
        cards.append(RenderedCard(
            appointment=apt,
            top=position.top,
            height=position.height,
            draw_height=rendered_height(position),
            left=layout.left,
            width=layout.width,
        ))
    return cards


def build_week_grid(
    week_start: date,
    appointments: Iterable[Appointment],
    cell_height: float,
    today: Optional[date] = None
) -> CalendarGrid:
    """One column per weekday, appointments matched by calendar date."""
    appointments = list(appointments)
    columns = []
    for day in get_week_dates(week_start):
        day_appointments = [apt for apt in appointments if is_appointment_on_date(apt, day)]
        columns.append(GridColumn(
            title=get_day_name(day),
            subtitle=format_date_short(day),
            date=day,
            cells=_build_cells(day_appointments, cell_height),
            highlighted=is_today(day, today),
        ))
    return CalendarGrid(mode=ViewMode.WEEK_GRID, columns=columns, cell_height=cell_height)


def build_staff_grid(
    selected_date: date,
    staff: Iterable[StaffMember],
    appointments: Iterable[Appointment],
    cell_height: float
) -> CalendarGrid:
    """
    One column per staff member for a single day.

    Appointments are matched to a column by exact staff name; an appointment
    whose staff name matches no roster entry is not shown.
    """
    appointments = [apt for apt in appointments if is_appointment_on_date(apt, selected_date)]
    columns = []
    for member in staff:
        member_appointments = [apt for apt in appointments if apt.staff_name == member.name]
        columns.append(GridColumn(
            title=member.name,
            subtitle=member.phone_number,
            date=selected_date,
            cells=_build_cells(member_appointments, cell_height),
            staff_id=member.id,
            staff_name=member.name,
        ))
    return CalendarGrid(mode=ViewMode.DAY_STAFF_GRID, columns=columns, cell_height=cell_height)


def build_grid(
    navigator: CalendarNavigator,
    appointments: Iterable[Appointment],
    staff: Iterable[StaffMember] = (),
    viewport: Viewport = Viewport(),
    today: Optional[date] = None
) -> CalendarGrid:
    """Build the grid for the navigator's current view."""
    if navigator.mode == ViewMode.WEEK_GRID:
        return build_week_grid(
            navigator.week_start, appointments, week_cell_height(viewport), today=today
        )
    if navigator.mode == ViewMode.DAY_STAFF_GRID:
        return build_staff_grid(
            navigator.selected_date, staff, appointments, staff_cell_height(viewport)
        )
    raise ValueError("The all-appointments view has no grid")


# Plain-text rendering

def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[:width - 1] + "~"


def render_text(grid: CalendarGrid, column_width: int = 16) -> str:
    """
    Render the grid as text, one line per quarter hour.

    A card's first quarter shows its start time and client; following
    quarters it covers show "|". Bookings that start outside the window
    (including ones that run into it) are listed below the grid.
    """
    time_width = 9
    lines = []
    header = " " * time_width + "".join(
        _truncate(column.title, column_width - 1).ljust(column_width)
        for column in grid.columns
    )
    subheader = " " * time_width + "".join(
        _truncate(column.subtitle, column_width - 1).ljust(column_width)
        for column in grid.columns
    )
    lines.extend([header.rstrip(), subheader.rstrip()])

    spans = []
    for column in grid.columns:
        column_spans = []
        for card in column.cards:
            start = minutes_since_midnight(card.appointment.time)
            column_spans.append((start, start + card.appointment.duration, card.appointment))
        spans.append(column_spans)

    for hour in grid.hours:
        for index in range(SLOTS_PER_HOUR):
            slot_start = hour * 60 + index * QUARTER_MINUTES
            slot_end = slot_start + QUARTER_MINUTES
            label = format_hour_label(hour) if index == 0 else ""
            row = label.rjust(time_width - 1) + " "
            for column_spans in spans:
                text = ""
                for start, end, apt in column_spans:
                    if slot_start <= start < slot_end:
                        text = f"{apt.time.split(' ')[0]} {apt.client_name}"
                        break
                    if start < slot_end and end > slot_start:
                        text = "|"
                row += _truncate(text, column_width - 1).ljust(column_width)
            lines.append(row.rstrip())

    window_start = CALENDAR_START_HOUR * 60
    window_end = CALENDAR_END_HOUR * 60
    off_grid = [
        (column, apt)
        for column, column_spans in zip(grid.columns, spans)
        for start, end, apt in column_spans
        if start < window_start or start >= window_end
    ]
    if off_grid:
        lines.append("")
        lines.append("Outside calendar hours:")
        for column, apt in off_grid:
            lines.append(f"  {column.title}: {apt.time} {apt.client_name} ({apt.service})")

    return "\n".join(lines)
