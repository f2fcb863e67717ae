"""Seed the configured store with the default board.

Creates the five standard columns (Uncategorized, Today, Follow Up, Later,
Done), the default Today categories and achievements, plus any team members
named on the command line.

Usage:
    python -m pulseboard.scripts.seed_board
    python -m pulseboard.scripts.seed_board --force --team-member "Alice" --team-member "Sam"
    python -m pulseboard.scripts.seed_board --backend file --state-file data/board.json

An already-seeded store is left alone unless ``--force`` is given.
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

from pulseboard.config import get_settings
from pulseboard.db.session import close_db, init_db
from pulseboard.domain.seed import default_state
from pulseboard.services.people import add_team_member
from pulseboard.storage import StateStore, build_store


async def seed_board(store: StateStore, force: bool = False, team_members: Sequence[str] = ()) -> bool:
    """Write the default board to ``store``.

    Returns False without writing when the store already holds a saved
    board and ``force`` is not set.
    """
    current = await store.load()
    if current.version > 0 and not force:
        return False

    state = default_state()
    for name in team_members:
        state, _ = add_team_member(state, name)
    # A forced seed overwrites whatever is stored
    await store.save(state, expected_version=None if force else current.version)
    return True


async def run(backend: str | None, state_file: Path | None, force: bool, team_members: list[str]) -> int:
    settings = get_settings()
    updates = {}
    if backend:
        updates["storage_backend"] = backend
    if state_file:
        updates["state_file"] = state_file
    settings = settings.model_copy(update=updates)

    uses_database = settings.storage_backend == "database"
    if uses_database:
        await init_db()
    try:
        seeded = await seed_board(build_store(settings), force=force, team_members=team_members)
    finally:
        if uses_database:
            await close_db()

    if seeded:
        print(f"Seeded board ({settings.storage_backend} store)")
        for name in team_members:
            print(f"  + team member: {name}")
    else:
        print("Board already seeded; use --force to overwrite")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the board store with the default board")
    parser.add_argument(
        "--backend",
        choices=["file", "database"],
        default=None,
        help="Storage backend (default: STORAGE_BACKEND setting)",
    )
    parser.add_argument(
        "--state-file",
        type=Path,
        default=None,
        help="Board file for the file backend (default: STATE_FILE setting)",
    )
    parser.add_argument(
        "--team-member",
        action="append",
        default=[],
        dest="team_members",
        help="Add a team member to the seeded board (repeatable)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing board",
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args.backend, args.state_file, args.force, args.team_members)))


if __name__ == "__main__":
    main()
