"""SQLModel table exports."""

from .habit import Habit, HabitCompletion, TrackingType

__all__ = [
    "Habit",
    "HabitCompletion",
    "TrackingType",
]
