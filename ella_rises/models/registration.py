from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel, UniqueConstraint

from ella_rises.utils.time import utcnow

STATUS_REGISTERED = "Registered"
STATUS_ATTENDED = "Attended"
STATUS_CANCELLED = "Cancelled"


class Registration(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("participant_email", "instance_id", name="unique_participant_instance"),
        # ids come from the storage sequence and are never reused
        {"sqlite_autoincrement": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    participant_email: str = Field(foreign_key="participant.email", index=True)
    instance_id: Optional[int] = Field(
        default=None, foreign_key="event_instance.id", ondelete="SET NULL", index=True
    )
    # Snapshot of what the participant signed up for
    event_name: str
    event_start: datetime = Field(sa_type=DateTime)
    status: str = Field(default=STATUS_REGISTERED)  # Registered | Attended | Cancelled
    attended: bool = Field(default=False)
    check_in_time: Optional[datetime] = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    # Filled in later by the post-event survey
    survey_satisfaction_score: Optional[int] = None
    survey_usefulness_score: Optional[int] = None
    survey_instructor_score: Optional[int] = None
    survey_recommendation_score: Optional[int] = None
    survey_overall_score: Optional[int] = None
    survey_comments: Optional[str] = None
    survey_submitted_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class SurveyResponse(SQLModel):
    satisfaction_score: Optional[int] = Field(default=None, ge=1, le=5)
    usefulness_score: Optional[int] = Field(default=None, ge=1, le=5)
    instructor_score: Optional[int] = Field(default=None, ge=1, le=5)
    recommendation_score: Optional[int] = Field(default=None, ge=0, le=10)
    overall_score: Optional[int] = Field(default=None, ge=1, le=5)
    comments: Optional[str] = None
