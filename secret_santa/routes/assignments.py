"""Draw and notification routes."""
import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from secret_santa.assignment.generator import generate_assignments
from secret_santa.core.config import settings
from secret_santa.core.security import require_admin
from secret_santa.errors import ValidationError
from secret_santa.notifications.mailer import Mailer, get_mailer
from secret_santa.notifications.notifier import notify_participants
from secret_santa.store import ParticipantStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["assignments"], dependencies=[Depends(require_admin)])


@router.post("/generate-assignments")
async def run_draw(store: ParticipantStore = Depends(get_store)):
    """
    Draw a new giver -> recipient assignment for the whole roster.

    Replaces any previous draw. Returns 400 with fewer than two participants
    and 409 if no valid draw was found or the roster changed meanwhile; in
    both 409 cases simply submitting again is the fix.
    """
    roster = store.list_all()
    drawn = generate_assignments(
        roster,
        max_attempts=settings.assignment_max_attempts,
        single_cycle=settings.assignment_single_cycle,
    )
    participants = store.replace_assignments(drawn)

    logger.info(f"Draw completed for {len(participants)} participants")
    return {"success": True, "message": "Assignments generated", "participants": participants}


@router.delete("/assignments")
async def clear_draw(store: ParticipantStore = Depends(get_store)):
    """Unset every assignment."""
    participants = store.clear_assignments()
    return {"success": True, "message": "Assignments cleared", "participants": participants}


@router.post("/send-emails")
def send_emails(
    resend: bool = False,
    store: ParticipantStore = Depends(get_store),
    mailer: Mailer = Depends(get_mailer),
):
    """
    Email every participant the name and wishes of their recipient.

    Participants already notified for the current draw are skipped unless
    ``resend=true``. Responds 200 when every attempted email went out and
    207 with the per-participant failures otherwise; successful deliveries
    are never rolled back.
    """
    roster = store.list_all()
    if not roster:
        raise ValidationError("No participants")
    if all(participant.assigned_to_id is None for participant in roster):
        raise ValidationError("Generate assignments before sending emails")

    report = notify_participants(
        roster,
        mailer,
        resend=resend,
        on_sent=lambda participant_id: store.mark_notified([participant_id]),
    )

    content = {
        "success": report.success,
        "message": report.message,
        "sent": report.sent,
        "skipped": report.skipped,
    }
    if report.failed:
        content["errors"] = [f"{failure.name}: {failure.error}" for failure in report.failed]
        content["failures"] = [asdict(failure) for failure in report.failed]

    return JSONResponse(
        status_code=207 if report.failed else 200,
        content=jsonable_encoder(content),
    )
