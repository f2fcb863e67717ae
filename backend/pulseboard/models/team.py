"""Team tables: per-member details and the role growth-goal catalogue."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pulseboard.db.base import Base, TimestampMixin


class TeamMemberDetailsRow(Base):
    """Qualitative data for one team member, keyed by display name.

    Nested records (goals, check-ins, 1:1s, red flags...) live in JSON
    columns. Rows written by older clients may hold JSON text or plain-string
    red flags; records normalize both on read.
    """

    __tablename__ = "team_member_details"

    name: Mapped[str] = mapped_column(String(200), primary_key=True)
    discipline: Mapped[str | None] = mapped_column(String(100), nullable=True)
    level: Mapped[str | None] = mapped_column(String(100), nullable=True)
    team: Mapped[str | None] = mapped_column(String(100), nullable=True)

    morale: Mapped[str | None] = mapped_column(String(20), nullable=True)
    performance: Mapped[str | None] = mapped_column(String(20), nullable=True)

    growth_goals: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    goals: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    morale_check_ins: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    performance_check_ins: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    clients: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    client_details: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    red_flags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    review_cycles: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    one_on_ones: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class RoleGrowthGoalRow(Base, TimestampMixin):
    """Growth goal template for a discipline and level."""

    __tablename__ = "role_growth_goals"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    discipline: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    level: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
