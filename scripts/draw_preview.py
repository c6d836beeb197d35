#!/usr/bin/env python3
"""
Dry-run the Secret Santa draw against the current roster.

Runs the draw repeatedly without saving anything and reports how often it
succeeded and how the gift chains were shaped. Useful to decide between the
default mode and ASSIGNMENT_SINGLE_CYCLE before the real draw. No names or
pairs are printed, so running it does not spoil anything.

Usage:
    python scripts/draw_preview.py [--runs N] [--single-cycle]
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import argparse
from collections import Counter

from sqlmodel import Session

from secret_santa.assignment.generator import assignment_cycles, generate_assignments
from secret_santa.core.config import settings
from secret_santa.core.database import engine
from secret_santa.errors import GenerationExhaustedError, RosterTooSmallError
from secret_santa.store import ParticipantStore


def main(runs: int, single_cycle: bool):
    """Draw ``runs`` times and print success rate and chain statistics."""
    with Session(engine) as session:
        roster = ParticipantStore(session).list_all()

    print(f"Participants: {len(roster)}")
    print(f"Mode: {'single cycle' if single_cycle else 'any derangement'}")

    failures = 0
    chain_counts = Counter()
    for _ in range(runs):
        try:
            drawn = generate_assignments(
                roster,
                max_attempts=settings.assignment_max_attempts,
                single_cycle=single_cycle,
            )
        except RosterTooSmallError as e:
            print(f"Error: {e}")
            sys.exit(1)
        except GenerationExhaustedError:
            failures += 1
            continue
        chain_counts[len(assignment_cycles(drawn))] += 1

    print(f"\nRuns: {runs}, failed: {failures}")
    for chains, count in sorted(chain_counts.items()):
        print(f"  {chains} chain(s): {count} ({count / runs:.1%})")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Dry-run the Secret Santa draw")
    parser.add_argument("--runs", type=int, default=1000, help="Number of draws to simulate")
    parser.add_argument(
        "--single-cycle",
        action="store_true",
        default=settings.assignment_single_cycle,
        help="Use single-cycle mode regardless of configuration",
    )
    args = parser.parse_args()
    main(runs=args.runs, single_cycle=args.single_cycle)
