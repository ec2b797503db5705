"""
Domain layer - Pure booking rules without external dependencies.
"""

from .availability import compute_occupied, is_occupied, slot_key
from .catalog import TIME_SLOTS, applicable_period
from .draft import DraftBuilder
from .models import BookedSlot, Period, StudentBooking, TimeSlotTemplate
from .schedule import ScheduleProjector, WeekGrid

__all__ = [
    "BookedSlot",
    "DraftBuilder",
    "Period",
    "ScheduleProjector",
    "StudentBooking",
    "TIME_SLOTS",
    "TimeSlotTemplate",
    "WeekGrid",
    "applicable_period",
    "compute_occupied",
    "is_occupied",
    "slot_key",
]
