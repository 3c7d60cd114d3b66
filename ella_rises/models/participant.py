from typing import Optional

from sqlmodel import Field, SQLModel


class Participant(SQLModel, table=True):
    # The email doubles as the account id everywhere in the app
    email: str = Field(primary_key=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    school: Optional[str] = None
    field_of_interest: Optional[str] = None
    total_donations: float = 0.0  # maintained by the donations flow


class ParticipantCreate(SQLModel):
    email: str = Field(min_length=3)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    school: Optional[str] = None
    field_of_interest: Optional[str] = None


class ParticipantUpdate(SQLModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    school: Optional[str] = None
    field_of_interest: Optional[str] = None
