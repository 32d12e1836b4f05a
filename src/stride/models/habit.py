"""Habit tracking data structures."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel


class TrackingType(str, Enum):
    """How progress on a habit is recorded."""

    COMPLETED = "COMPLETED"
    COUNTER = "COUNTER"


class Habit(SQLModel, table=True):
    """A user-defined habit and its persisted schedule fields."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(default=0, nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    description: Optional[str] = Field(default=None, max_length=255)
    icon: str = Field(default="check", max_length=32)

    # DAILY | WEEKLY | CUSTOM
    schedule_type: str = Field(default="DAILY", max_length=16)
    # Day-of-week list as stored by the client, e.g. "[1,3,5]" (0 = Sunday)
    schedule_days_of_week: Optional[str] = Field(default=None, max_length=32)
    schedule_start_date: Optional[date] = Field(default=None)
    schedule_end_date: Optional[date] = Field(default=None)

    target_count: Optional[int] = Field(default=None)
    tracking_type: str = Field(default=TrackingType.COMPLETED.value, max_length=16)
    unit: Optional[str] = Field(default=None, max_length=32)
    display_order: int = Field(default=0, nullable=False)
    archived_at: Optional[datetime] = Field(default=None)

    completions: list["HabitCompletion"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship("HabitCompletion", back_populates="habit"),
    )

    @property
    def is_active(self) -> bool:
        return self.archived_at is None

    @property
    def is_counter(self) -> bool:
        return self.tracking_type == TrackingType.COUNTER.value


class HabitCompletion(SQLModel, table=True):
    """Completion record for a habit on one local calendar day."""

    __tablename__: ClassVar[str] = "habit_completion"

    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    occurred_on: date = Field(primary_key=True, index=True)
    user_id: int = Field(default=0, nullable=False, index=True)
    completed: bool = Field(default=False, nullable=False)
    value: Optional[float] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)
    notes: Optional[str] = Field(default=None, max_length=500)
    mood: Optional[int] = Field(default=None)

    habit: "Habit" = Relationship(
        back_populates="completions",
        sa_relationship=relationship("Habit", back_populates="completions"),
    )
