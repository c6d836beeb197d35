"""Participant routes: public registration and admin roster management."""
from uuid import UUID

from fastapi import APIRouter, Depends

from secret_santa.core.security import require_admin
from secret_santa.models import ParticipantCreate, ParticipantRead, ParticipantUpdate
from secret_santa.store import ParticipantStore, get_store

router = APIRouter(prefix="/api/participants", tags=["participants"])


@router.post("")
async def register_participant(
    payload: ParticipantCreate,
    store: ParticipantStore = Depends(get_store),
):
    """
    Add a participant.

    Public: this is what the registration form posts to. Returns 409 if the
    email address is already registered.
    """
    participant = store.create(payload)
    return {"success": True, "message": "Participant added", "participant": participant}


@router.get("", dependencies=[Depends(require_admin)], response_model=list[ParticipantRead])
async def list_participants(store: ParticipantStore = Depends(get_store)):
    """List every participant in registration order, with assignments."""
    return store.list_all()


@router.get(
    "/{participant_id}",
    dependencies=[Depends(require_admin)],
    response_model=ParticipantRead,
)
async def get_participant(participant_id: UUID, store: ParticipantStore = Depends(get_store)):
    return store.get(participant_id)


@router.put("/{participant_id}", dependencies=[Depends(require_admin)])
async def update_participant(
    participant_id: UUID,
    payload: ParticipantUpdate,
    store: ParticipantStore = Depends(get_store),
):
    """
    Edit a participant's name, email and wishes.

    The participant keeps their id and current assignment.
    """
    participant = store.update(participant_id, payload)
    return {"success": True, "participant": participant}


@router.delete("/{participant_id}", dependencies=[Depends(require_admin)])
async def delete_participant(participant_id: UUID, store: ParticipantStore = Depends(get_store)):
    """
    Remove a participant.

    Existing assignments are cleared, since they no longer cover the roster;
    run the draw again afterwards.
    """
    participants = store.delete(participant_id)
    return {"success": True, "message": "Participant deleted", "participants": participants}
