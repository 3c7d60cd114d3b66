from typing import Optional

from sqlmodel import Field, SQLModel


class EventDefinition(SQLModel, table=True):
    __tablename__ = "event"

    name: str = Field(primary_key=True)
    type: Optional[str] = None
    description: Optional[str] = None
    recurrence_pattern: Optional[str] = None  # weekly | monthly | one-off, free text
    default_capacity: Optional[int] = Field(default=None, ge=0)


class EventDefinitionCreate(SQLModel):
    name: str = Field(min_length=1)
    type: Optional[str] = None
    description: Optional[str] = None
    recurrence_pattern: Optional[str] = None
    default_capacity: Optional[int] = Field(default=None, ge=0)


class EventDefinitionUpdate(SQLModel):
    type: Optional[str] = None
    description: Optional[str] = None
    recurrence_pattern: Optional[str] = None
    default_capacity: Optional[int] = Field(default=None, ge=0)
