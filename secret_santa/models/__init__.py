from secret_santa.models.participant import (
    Participant,
    ParticipantCreate,
    ParticipantRead,
    ParticipantUpdate,
)

__all__ = ["Participant", "ParticipantCreate", "ParticipantRead", "ParticipantUpdate"]
