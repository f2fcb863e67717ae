"""Services package."""

from pulseboard.services.board_state import BoardStateManager
from pulseboard.services.placement import complete_task, move_task, relocate_task

__all__ = [
    "BoardStateManager",
    "complete_task",
    "move_task",
    "relocate_task",
]
