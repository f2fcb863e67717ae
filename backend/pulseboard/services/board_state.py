"""The single persistence boundary for board mutations."""

import asyncio
from typing import Callable, TypeVar

import structlog

from pulseboard.domain.records import AppState
from pulseboard.storage.base import StateStore

logger = structlog.get_logger()

Mutation = Callable[[AppState], AppState]
T = TypeVar("T")


class BoardStateManager:
    """Owns the board's read-modify-write cycle.

    Mutations are pure ``(AppState) -> AppState`` functions. ``apply`` loads
    the current snapshot, runs the mutation and saves the result against the
    version it loaded, so a write that raced another session fails with
    ``StaleStateError`` instead of silently overwriting it. Within one
    process a lock keeps writers in sequence.
    """

    def __init__(self, store: StateStore):
        self.store = store
        self._lock = asyncio.Lock()

    async def snapshot(self) -> AppState:
        return await self.store.load()

    async def apply(self, mutation: Mutation, action: str = "mutation") -> AppState:
        """Apply ``mutation`` and persist the result.

        A mutation that returns the state it was given changed nothing and
        is not written.
        """
        async with self._lock:
            current = await self.store.load()
            updated = mutation(current)
            if updated is current:
                logger.debug("board_unchanged", action=action, version=current.version)
                return current

            saved = await self.store.save(updated, expected_version=current.version)
            logger.info("board_saved", action=action, version=saved.version)
            return saved

    async def apply_with_result(
        self,
        mutation: Callable[[AppState], tuple[AppState, T]],
        action: str = "mutation",
    ) -> tuple[AppState, T]:
        """Like :meth:`apply` for mutations that also return what they touched."""
        results: list[T] = []

        def run(state: AppState) -> AppState:
            updated, result = mutation(state)
            results.append(result)
            return updated

        saved = await self.apply(run, action=action)
        return saved, results[0]
