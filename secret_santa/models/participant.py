"""Participant model and the request/response shapes built around it.

This module defines the Participant table, which is the whole persistent
state of a Secret Santa round: who takes part, how to reach them, what they
wish for, and (once the draw has run) whom they give a gift to.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import EmailStr, field_validator
from sqlmodel import Field, SQLModel


class Participant(SQLModel, table=True):
    """A person taking part in the gift exchange.

    Attributes:
        id: Unique identifier (UUID), assigned at creation and never reused.
        name: Display name, shown to the giver in the assignment email.
        email: Contact address, unique among live participants and stored
            lower-cased so that uniqueness is case-insensitive.
        wishlist: Free-text wishes; may be empty.
        assigned_to_id: The participant this person gives a gift to. Unset
            until the draw runs, replaced wholesale by every new draw.
        created_at: Registration time; the roster is ordered by it.
        notified_at: When the assignment email was delivered for the
            current draw. Cleared whenever assignments change.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    wishlist: str = Field(default="")
    assigned_to_id: UUID | None = Field(default=None, foreign_key="participant.id")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    notified_at: datetime | None = None


class ParticipantCreate(SQLModel):
    """Payload of the public registration form."""
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    wishlist: str = Field(default="", max_length=2000)

    @field_validator("name", "wishlist", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class ParticipantUpdate(ParticipantCreate):
    """Admin edit of an existing participant; identity is not editable."""


class ParticipantRead(SQLModel):
    """A participant as returned by the API and passed to the draw.

    ``assigned_to`` is the recipient's display name, resolved from the same
    roster; it is None when no assignment exists.
    """
    id: UUID
    name: str
    email: str
    wishlist: str = ""
    assigned_to_id: UUID | None = None
    assigned_to: str | None = None
    created_at: datetime | None = None
    notified_at: datetime | None = None
