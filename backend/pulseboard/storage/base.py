"""Persistence contract for the board snapshot."""

from typing import Protocol, runtime_checkable

from pulseboard.domain.records import AppState


@runtime_checkable
class StateStore(Protocol):
    """Durable home of one board.

    ``load`` returns the default board when nothing has been stored yet.
    ``save`` writes a full snapshot and returns it with ``version`` bumped;
    when ``expected_version`` is given and no longer matches what is stored,
    it raises :class:`~pulseboard.exceptions.StaleStateError` and writes
    nothing.
    """

    async def load(self) -> AppState: ...

    async def save(self, state: AppState, expected_version: int | None = None) -> AppState: ...
