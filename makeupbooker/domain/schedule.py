"""
Projection of committed bookings onto the Monday - Saturday week grid.

This is what the teacher view renders: one column per day, one row per
catalog time slot and one cell per computer.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import pendulum
from pendulum import Date

from .availability import SlotKey, key_of, slot_key
from .catalog import TIME_SLOTS, applicable_period
from .models import RESOURCES, Period, ResourceId, StudentBooking, TimeSlotTemplate

DAYS_IN_WEEK_GRID = 6  # Monday to Saturday


@dataclass(frozen=True)
class ResourceCell:
    """A computer in a time slot, with its occupant if booked."""
    resource_id: ResourceId
    occupant_name: Optional[str] = None
    occupant_class: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.occupant_name is None


@dataclass(frozen=True)
class ScheduleCell:
    """
    One (day, time slot) cell of the grid.

    Cells whose time slot belongs to another period than the day's
    (e.g. a PM row on Saturday) are not applicable and carry no
    resource cells at all.
    """
    date: Date
    time_slot: TimeSlotTemplate
    applicable: bool
    resources: Tuple[ResourceCell, ...] = ()

    @property
    def booked(self) -> List[ResourceCell]:
        return [cell for cell in self.resources if not cell.is_empty]


@dataclass(frozen=True)
class DayColumn:
    date: Date
    period: Optional[Period]
    cells: Tuple[ScheduleCell, ...]


@dataclass(frozen=True)
class WeekGrid:
    """The projected week, Monday first."""
    days: Tuple[DayColumn, ...]

    @property
    def start(self) -> Date:
        return self.days[0].date

    @property
    def end(self) -> Date:
        return self.days[-1].date

    @property
    def time_slots(self) -> Tuple[TimeSlotTemplate, ...]:
        return TIME_SLOTS

    def cell(self, date: Date, time_slot_id: str) -> ScheduleCell:
        """
        Look up a cell by date and time slot id.

        Raises:
            KeyError: If the date or time slot is not part of this grid
        """
        for day in self.days:
            if day.date != date:
                continue
            for cell in day.cells:
                if cell.time_slot.id == time_slot_id:
                    return cell
        raise KeyError(f"No cell for {date} {time_slot_id} in week {self.start} - {self.end}")

    def booked_count(self) -> int:
        return sum(len(cell.booked) for day in self.days for cell in day.cells)


class ScheduleProjector:
    """
    Builds week and day views from the booking store contents.

    Every (day, time slot, computer) combination yields a defined cell;
    there are no gaps in the grid.
    """

    @staticmethod
    def week_range(anchor: Date) -> List[Date]:
        """
        Monday to Saturday of the week containing ``anchor``.

        A Sunday anchor belongs to the week that just ended.
        """
        if anchor.day_of_week == pendulum.SUNDAY:
            monday = anchor.subtract(days=6)
        else:
            monday = anchor.subtract(days=anchor.day_of_week - pendulum.MONDAY)

        return [monday.add(days=offset) for offset in range(DAYS_IN_WEEK_GRID)]

    def project_week(self, anchor: Date, bookings: Iterable[StudentBooking]) -> WeekGrid:
        occupants = self._index_occupants(bookings)
        return WeekGrid(
            days=tuple(
                self._project_column(day, occupants)
                for day in self.week_range(anchor)
            )
        )

    def project_day(self, date: Date, bookings: Iterable[StudentBooking]) -> DayColumn:
        return self._project_column(date, self._index_occupants(bookings))

    @staticmethod
    def _index_occupants(bookings: Iterable[StudentBooking]) -> Dict[SlotKey, StudentBooking]:
        """Map every booked slot key to the booking holding it."""
        occupants: Dict[SlotKey, StudentBooking] = {}
        for booking in bookings:
            for slot in booking.slots:
                occupants[key_of(slot)] = booking
        return occupants

    def _project_column(
        self,
        date: Date,
        occupants: Dict[SlotKey, StudentBooking],
    ) -> DayColumn:
        period = applicable_period(date.day_of_week)
        cells = tuple(
            self._project_cell(date, time_slot, period, occupants)
            for time_slot in TIME_SLOTS
        )
        return DayColumn(date=date, period=period, cells=cells)

    @staticmethod
    def _project_cell(
        date: Date,
        time_slot: TimeSlotTemplate,
        period: Optional[Period],
        occupants: Dict[SlotKey, StudentBooking],
    ) -> ScheduleCell:
        if time_slot.period != period:
            return ScheduleCell(date=date, time_slot=time_slot, applicable=False)

        resources: List[ResourceCell] = []
        for resource in RESOURCES:
            occupant = occupants.get(slot_key(date, time_slot.id, resource))
            if occupant is None:
                resources.append(ResourceCell(resource_id=resource))
            else:
                resources.append(
                    ResourceCell(
                        resource_id=resource,
                        occupant_name=occupant.name,
                        occupant_class=occupant.student_class,
                    )
                )

        return ScheduleCell(
            date=date,
            time_slot=time_slot,
            applicable=True,
            resources=tuple(resources),
        )
