"""Participant store: the only owner of the roster.

Route handlers and the draw never touch Participant rows directly; they go
through these operations, which keep email addresses unique and serialize
writes so that at most one mutation of the roster is in flight at a time.
"""
import logging
import threading
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from uuid import UUID

from fastapi import Depends
from sqlmodel import Session, select

from secret_santa.core.database import get_session
from secret_santa.errors import (
    DuplicateContactError,
    ParticipantNotFoundError,
    RosterChangedError,
    ValidationError,
)
from secret_santa.models import Participant, ParticipantCreate, ParticipantRead, ParticipantUpdate

logger = logging.getLogger(__name__)

# Process-wide: every ParticipantStore shares it, whatever session it wraps.
_write_lock = threading.RLock()


def to_roster(participants: Sequence[Participant]) -> list[ParticipantRead]:
    """Convert rows to API objects, resolving recipient names within the roster."""
    names = {p.id: p.name for p in participants}
    roster = []
    for p in participants:
        item = ParticipantRead.model_validate(p)
        item.assigned_to = names.get(p.assigned_to_id)
        roster.append(item)
    return roster


class ParticipantStore:
    """CRUD over the roster bound to one database session."""

    def __init__(self, session: Session):
        self.session = session

    def _rows(self) -> list[Participant]:
        statement = select(Participant).order_by(Participant.created_at, Participant.id)
        return list(self.session.exec(statement).all())

    def _get_row(self, participant_id: UUID) -> Participant:
        participant = self.session.get(Participant, participant_id)
        if not participant:
            raise ParticipantNotFoundError("Participant not found")
        return participant

    def _ensure_email_free(self, email: str, exclude_id: UUID | None = None) -> None:
        statement = select(Participant).where(Participant.email == email)
        existing = self.session.exec(statement).first()
        if existing and existing.id != exclude_id:
            raise DuplicateContactError("This email is already registered")

    def list_all(self) -> list[ParticipantRead]:
        """Return the roster in registration order."""
        return to_roster(self._rows())

    def get(self, participant_id: UUID) -> ParticipantRead:
        participant = self._get_row(participant_id)
        recipient = (
            self.session.get(Participant, participant.assigned_to_id)
            if participant.assigned_to_id
            else None
        )
        item = ParticipantRead.model_validate(participant)
        item.assigned_to = recipient.name if recipient else None
        return item

    def create(self, data: ParticipantCreate) -> ParticipantRead:
        with _write_lock:
            self._ensure_email_free(data.email)
            participant = Participant(name=data.name, email=data.email, wishlist=data.wishlist)
            self.session.add(participant)
            self.session.commit()
            self.session.refresh(participant)

        logger.info(f"Participant {participant.id} registered")
        return ParticipantRead.model_validate(participant)

    def update(self, participant_id: UUID, data: ParticipantUpdate) -> ParticipantRead:
        with _write_lock:
            participant = self._get_row(participant_id)
            self._ensure_email_free(data.email, exclude_id=participant_id)
            participant.name = data.name
            participant.email = data.email
            participant.wishlist = data.wishlist
            self.session.add(participant)
            self.session.commit()

        logger.info(f"Participant {participant_id} updated")
        return self.get(participant_id)

    def delete(self, participant_id: UUID) -> list[ParticipantRead]:
        """
        Remove a participant and return the remaining roster.

        Every assignment is cleared as well: a draw that names the deleted
        participant, or leaves their recipient without a giver, is no longer
        a valid derangement.
        """
        with _write_lock:
            participant = self._get_row(participant_id)
            had_assignments = self._clear_rows(self._rows())
            self.session.flush()
            self.session.delete(participant)
            self.session.commit()

        logger.info(f"Participant {participant_id} deleted")
        if had_assignments:
            logger.info("Assignments cleared after participant deletion")
        return self.list_all()

    def replace_assignments(self, roster: Sequence[ParticipantRead]) -> list[ParticipantRead]:
        """
        Persist a draw over the whole roster.

        ``roster`` must cover exactly the participants currently stored;
        otherwise someone registered or was removed while the draw ran and
        RosterChangedError is raised without writing anything. Delivery
        stamps are reset since the previous emails are now stale.
        """
        with _write_lock:
            rows = {p.id: p for p in self._rows()}
            drawn = {p.id: p.assigned_to_id for p in roster}

            if set(drawn) != set(rows):
                raise RosterChangedError(
                    "The participant list changed during the draw; please run it again"
                )
            if set(drawn.values()) != set(rows) or any(g == r for g, r in drawn.items()):
                raise ValidationError(
                    "Assignments must give every participant exactly one other participant"
                )

            for participant_id, recipient_id in drawn.items():
                row = rows[participant_id]
                row.assigned_to_id = recipient_id
                row.notified_at = None
                self.session.add(row)
            self.session.commit()

        logger.info(f"Assignments saved for {len(drawn)} participants")
        return self.list_all()

    def _clear_rows(self, rows: Iterable[Participant]) -> bool:
        changed = False
        for row in rows:
            if row.assigned_to_id is not None or row.notified_at is not None:
                row.assigned_to_id = None
                row.notified_at = None
                self.session.add(row)
                changed = True
        return changed

    def clear_assignments(self) -> list[ParticipantRead]:
        """Unset every recipient, e.g. before reopening registration."""
        with _write_lock:
            self._clear_rows(self._rows())
            self.session.commit()

        logger.info("Assignments cleared")
        return self.list_all()

    def mark_notified(self, participant_ids: Iterable[UUID]) -> None:
        """Record that the assignment email reached these participants."""
        now = datetime.now(UTC)
        with _write_lock:
            for participant_id in participant_ids:
                row = self.session.get(Participant, participant_id)
                if row:
                    row.notified_at = now
                    self.session.add(row)
            self.session.commit()


def get_store(session: Session = Depends(get_session)) -> ParticipantStore:
    """Dependency for getting a store bound to the request's session."""
    return ParticipantStore(session)
