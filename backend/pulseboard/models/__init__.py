"""SQLAlchemy models package."""

from pulseboard.models.board import (
    AchievementRow,
    BoardColumn,
    BoardMeta,
    BoardSettingsRow,
    CategoryRow,
    DailyStatsRow,
    ProjectRow,
    TaskRow,
    UserStatsRow,
)
from pulseboard.models.team import RoleGrowthGoalRow, TeamMemberDetailsRow

__all__ = [
    "AchievementRow",
    "BoardColumn",
    "BoardMeta",
    "BoardSettingsRow",
    "CategoryRow",
    "DailyStatsRow",
    "ProjectRow",
    "TaskRow",
    "UserStatsRow",
    "RoleGrowthGoalRow",
    "TeamMemberDetailsRow",
]
