"""Board exceptions.

Every error raised across the service and storage layers derives from
BoardError so the API boundary can render it with one handler.
"""

from typing import Optional


class BoardError(Exception):
    """Base exception for board errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "BOARD_ERROR",
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.code = code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class NotFoundError(BoardError):
    """A referenced record does not exist."""

    status_code = 404

    def __init__(self, message: str, code: str = "NOT_FOUND"):
        super().__init__(message=message, code=code)


class TaskNotFoundError(NotFoundError):
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found", code="TASK_NOT_FOUND")


class CategoryNotFoundError(NotFoundError):
    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Category {category_id} not found", code="CATEGORY_NOT_FOUND")


class ColumnNotFoundError(NotFoundError):
    def __init__(self, column_id: str):
        self.column_id = column_id
        super().__init__(f"Column {column_id} not found", code="COLUMN_NOT_FOUND")


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found", code="PROJECT_NOT_FOUND")


class MemberNotFoundError(NotFoundError):
    """No team-member details record exists under the given name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__("Team member not found", code="MEMBER_NOT_FOUND")


class GoalNotFoundError(NotFoundError):
    def __init__(self, goal_id: str):
        self.goal_id = goal_id
        super().__init__("Goal not found", code="GOAL_NOT_FOUND")


class MemberRecordNotFoundError(NotFoundError):
    """A nested record (review cycle, 1:1, client...) is missing on a member."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(
            f"{kind.capitalize()} {record_id} not found",
            code=f"{kind.upper().replace(' ', '_')}_NOT_FOUND",
        )


class RoleGoalNotFoundError(NotFoundError):
    def __init__(self, goal_id: str):
        self.goal_id = goal_id
        super().__init__(f"Role growth goal {goal_id} not found", code="ROLE_GOAL_NOT_FOUND")


class ValidationFailedError(BoardError):
    """Request payload is missing fields or carries invalid values."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message=message, code="VALIDATION_FAILED")


class AuthenticationError(BoardError):
    """Missing or invalid integration API key."""

    status_code = 401

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message=message, code="UNAUTHORIZED")


class StaleStateError(BoardError):
    """A save was attempted against an outdated snapshot.

    Raised by a state store when the version the caller loaded no longer
    matches the stored version, i.e. another session wrote in between.
    """

    status_code = 409

    def __init__(self, expected_version: int, stored_version: int):
        self.expected_version = expected_version
        self.stored_version = stored_version
        super().__init__(
            message=(
                f"Board state changed since it was loaded "
                f"(expected version {expected_version}, stored {stored_version})"
            ),
            code="STALE_STATE",
        )


class StorageError(BoardError):
    """The persistence backend failed to read or write the board."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message=message, code="STORAGE_ERROR")
