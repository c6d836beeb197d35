"""Assignment emails: one message per giver, failures reported per giver."""
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from uuid import UUID

from jinja2 import Environment, FileSystemLoader, select_autoescape

from secret_santa.core.config import settings
from secret_santa.errors import DeliveryError
from secret_santa.models import ParticipantRead
from secret_santa.notifications.mailer import Mailer

logger = logging.getLogger(__name__)

NO_WISHES = "No wishes"

templates = Environment(
    loader=FileSystemLoader(Path(__file__).resolve().parent.parent / "templates"),
    autoescape=select_autoescape(["html"]),
)


@dataclass
class DeliveryFailure:
    participant_id: UUID
    name: str
    email: str
    error: str


@dataclass
class DeliveryReport:
    """Outcome of one notification batch.

    A batch never aborts on a failed delivery: the rest of the roster is
    still notified and the failure is listed here.
    """
    total: int
    sent: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[DeliveryFailure] = field(default_factory=list)
    sent_ids: list[UUID] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def message(self) -> str:
        return f"Emails sent: {len(self.sent)} of {self.total}"


def render_assignment(giver: ParticipantRead, recipient: ParticipantRead) -> tuple[str, str]:
    """Render the (text, html) bodies of one assignment email."""
    context = {
        "giver": giver,
        "recipient": recipient,
        "wishes": recipient.wishlist.strip() or NO_WISHES,
        "event_name": settings.event_name,
        "gift_budget": settings.gift_budget,
    }
    text = templates.get_template("assignment_email.txt").render(context)
    html = templates.get_template("assignment_email.html").render(context)
    return text, html


def notify_participants(
    roster: Sequence[ParticipantRead],
    mailer: Mailer,
    *,
    resend: bool = False,
    on_sent: Callable[[UUID], None] | None = None,
) -> DeliveryReport:
    """
    Email every assigned participant the name and wishes of their recipient.

    Recipients are resolved by id within ``roster``. Participants without an
    assignment are skipped, and so are participants already notified for the
    current draw unless ``resend`` is set. Each participant gets at most one
    attempt per call; a failed delivery is recorded and the batch goes on.

    ``on_sent`` is called with the participant id right after each accepted
    email, before the next one is attempted, so a batch cut short still has
    every delivery so far recorded.
    """
    by_id = {participant.id: participant for participant in roster}
    report = DeliveryReport(total=len(by_id))
    seen = set()

    for giver in roster:
        if giver.id in seen:
            continue
        seen.add(giver.id)

        if giver.assigned_to_id is None:
            logger.info(f"Participant {giver.id} skipped: no assignment")
            report.skipped.append(giver.name)
            continue
        if giver.notified_at is not None and not resend:
            logger.info(f"Participant {giver.id} skipped: already notified")
            report.skipped.append(giver.name)
            continue

        try:
            recipient = by_id.get(giver.assigned_to_id)
            if recipient is None:
                raise DeliveryError("Assigned recipient is not in the roster")
            text, html = render_assignment(giver, recipient)
            mailer.send(giver.email, settings.email_subject, text, html)
        except Exception as e:
            logger.error(f"Email to participant {giver.id} failed: {e}")
            report.failed.append(
                DeliveryFailure(
                    participant_id=giver.id,
                    name=giver.name,
                    email=giver.email,
                    error=str(e),
                )
            )
            continue

        logger.info(f"Email sent to participant {giver.id}")
        if on_sent is not None:
            on_sent(giver.id)
        report.sent.append(giver.name)
        report.sent_ids.append(giver.id)

    logger.info(f"{report.message} ({len(report.failed)} failed, {len(report.skipped)} skipped)")
    return report
