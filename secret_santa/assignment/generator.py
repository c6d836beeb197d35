"""Secret Santa draw: random derangements over a participant roster.

A valid draw maps every participant to a distinct other participant, i.e. a
permutation of the roster with no fixed point. Two modes are supported:

- **any derangement** (default): rejection sampling. Shuffle uniformly,
  reject candidates where somebody draws themselves, retry up to a ceiling.
  The expected number of shuffles tends to e (about 2.72), so a ceiling of
  100 is never reached with a correct shuffle.
- **single cycle**: Sattolo's algorithm yields a uniformly random cyclic
  permutation, so the gift chain passes through everybody once and closed
  pairs (A gives to B, B gives to A) cannot happen for rosters above two.
  It never needs a retry.

Both modes are pure: no module-level state, every call owns its random
generator, and the input roster is never mutated.
"""
import logging
import random
from collections.abc import Hashable, Sequence
from typing import TypeVar

from secret_santa.errors import GenerationExhaustedError, RosterTooSmallError, ValidationError
from secret_santa.models import ParticipantRead

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)

DEFAULT_MAX_ATTEMPTS = 100
MIN_PARTICIPANTS = 2


def _shuffle(items: list, rng: random.Random, *, cyclic: bool = False) -> None:
    """Shuffle in place by swapping (Fisher-Yates, or Sattolo when cyclic).

    Every permutation is equally likely; with ``cyclic`` every single-cycle
    permutation is equally likely instead.
    """
    for i in range(len(items) - 1, 0, -1):
        j = rng.randrange(i) if cyclic else rng.randrange(i + 1)
        items[i], items[j] = items[j], items[i]


def has_fixed_point(original: Sequence[T], candidate: Sequence[T]) -> bool:
    """Return True if any position maps an item to itself."""
    return any(a == b for a, b in zip(original, candidate))


def derange(
    items: Sequence[T],
    *,
    rng: random.Random,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    single_cycle: bool = False,
) -> list[T]:
    """Return a derangement of ``items`` as a list of recipients by position.

    ``items[i]`` gives to the returned ``[i]``. Raises RosterTooSmallError
    for fewer than two items (before any shuffling) and
    GenerationExhaustedError when ``max_attempts`` shuffles all had a fixed
    point.
    """
    n = len(items)
    if n < MIN_PARTICIPANTS:
        raise RosterTooSmallError(f"Need at least {MIN_PARTICIPANTS} participants, got {n}")
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    # Only one derangement exists for two people
    if n == 2:
        return [items[1], items[0]]

    candidate = list(items)
    if single_cycle:
        _shuffle(candidate, rng, cyclic=True)
        return candidate

    for attempt in range(1, max_attempts + 1):
        _shuffle(candidate, rng)
        if not has_fixed_point(items, candidate):
            logger.debug(f"Derangement of {n} found after {attempt} attempt(s)")
            return candidate

    logger.warning(f"No derangement of {n} found in {max_attempts} attempts")
    raise GenerationExhaustedError(
        f"Could not generate assignments without self-gifting after {max_attempts} attempts"
    )


def generate_assignments(
    roster: Sequence[ParticipantRead],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    single_cycle: bool = False,
    seed: int | None = None,
) -> list[ParticipantRead]:
    """
    Draw a giver -> recipient assignment for the whole roster.

    Returns new participant objects, in roster order, with ``assigned_to_id``
    and ``assigned_to`` filled in. Identity, contact and wish data are copied
    unchanged. Any assignment left over from a previous round is replaced.
    Pass ``seed`` only for reproducible tests; the default draws fresh
    randomness on every call.
    """
    if len(roster) < MIN_PARTICIPANTS:
        raise RosterTooSmallError(
            f"Need at least {MIN_PARTICIPANTS} participants, got {len(roster)}"
        )

    ids = [participant.id for participant in roster]
    if len(set(ids)) != len(ids):
        raise ValidationError("Participant identities must be distinct")

    recipients = derange(
        ids,
        rng=random.Random(seed),
        max_attempts=max_attempts,
        single_cycle=single_cycle,
    )
    names = {participant.id: participant.name for participant in roster}

    return [
        participant.model_copy(
            update={"assigned_to_id": recipient_id, "assigned_to": names[recipient_id]}
        )
        for participant, recipient_id in zip(roster, recipients)
    ]


def assignment_cycles(roster: Sequence[ParticipantRead]) -> list[list[ParticipantRead]]:
    """Split an assigned roster into its gift chains.

    Each chain starts at the earliest participant in roster order not yet
    visited and follows ``assigned_to_id`` until it returns to the start.
    Raises ValidationError if the assignment is not a permutation of the
    roster.
    """
    by_id = {participant.id: participant for participant in roster}
    seen = set()
    cycles = []

    for start in roster:
        if start.id in seen:
            continue
        cycle = []
        current = start
        while current.id not in seen:
            seen.add(current.id)
            cycle.append(current)
            current = by_id.get(current.assigned_to_id)
            if current is None:
                raise ValidationError(f"{cycle[-1].name} has no recipient in this roster")
        if current.id != start.id:
            raise ValidationError(f"{current.name} is assigned to more than one giver")
        cycles.append(cycle)

    return cycles
