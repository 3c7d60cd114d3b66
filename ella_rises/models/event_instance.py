from datetime import datetime
from typing import Optional

from pydantic import field_validator
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from ella_rises.utils.time import as_naive_utc


class EventInstance(SQLModel, table=True):
    __tablename__ = "event_instance"

    id: Optional[int] = Field(default=None, primary_key=True)
    event_name: str = Field(foreign_key="event.name", ondelete="RESTRICT", index=True)
    # Stored as naive UTC, see utils.time
    start_time: datetime = Field(index=True, sa_type=DateTime)
    end_time: Optional[datetime] = Field(default=None, sa_type=DateTime)
    location: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)  # None = unlimited
    registration_deadline: Optional[datetime] = Field(default=None, sa_type=DateTime)
    # Non-cancelled registrations; only ever changed by a conditional UPDATE
    registered_count: int = Field(default=0)


class InstanceCreate(SQLModel):
    start_time: datetime
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    registration_deadline: Optional[datetime] = None

    @field_validator("start_time", "end_time", "registration_deadline")
    @classmethod
    def _naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(value)


class InstanceUpdate(SQLModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    registration_deadline: Optional[datetime] = None

    @field_validator("start_time", "end_time", "registration_deadline")
    @classmethod
    def _naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(value)
