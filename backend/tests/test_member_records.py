"""
Tests for editing team-member records and the role growth-goal catalogue.

Covers:
    - update_profile              — patch and clear fields, reject unknown ones
    - goals                       — delete, add milestones
    - clients                     — add with detail sheet, remove, patch details
    - review cycles               — six-month default, update, delete
    - 1:1s                        — patch and delete
    - growth goals                — sync from the catalogue, weekly ratings
    - role goal catalogue         — create, filter, update, delete
"""

from datetime import datetime, timezone

import pytest

from pulseboard.exceptions import (
    GoalNotFoundError,
    MemberNotFoundError,
    MemberRecordNotFoundError,
    RoleGoalNotFoundError,
    ValidationFailedError,
)
from pulseboard.services import member_records, role_goals, team_details


@pytest.fixture
def catalogue(board, now):
    """Board with two Senior Design goals and one Junior Design goal."""
    state, senior_a = role_goals.create_role_goal(
        board, {"discipline": "Design", "level": "Senior", "title": "Mentor juniors"}, now=now
    )
    state, senior_b = role_goals.create_role_goal(
        state, {"discipline": "Design", "level": "Senior", "title": "Own a design system"}, now=now
    )
    state, _ = role_goals.create_role_goal(
        state, {"discipline": "Design", "level": "Junior", "title": "Ship a feature"}, now=now
    )
    return state, [senior_a.id, senior_b.id]


class TestProfile:

    def test_patch_fields(self, board, now):
        state, member = member_records.update_profile(
            board, "alice", {"discipline": "Design", "level": "Senior", "morale": "good"}, now=now
        )

        assert (member.discipline, member.level, member.morale) == ("Design", "Senior", "good")
        assert member.updated_at == now
        assert state.team_member_details["Alice"].level == "Senior"

    def test_none_clears(self, board, now):
        state, _ = member_records.update_profile(board, "Alice", {"notes": "Prefers async"}, now=now)

        _, member = member_records.update_profile(state, "Alice", {"notes": None}, now=now)

        assert member.notes is None

    def test_unknown_field_rejected(self, board):
        with pytest.raises(ValidationFailedError, match="Unknown profile fields: name"):
            member_records.update_profile(board, "Alice", {"name": "Eve"})

    def test_bad_rating_rejected(self, board):
        with pytest.raises(ValidationFailedError, match="Invalid profile"):
            member_records.update_profile(board, "Alice", {"morale": "great"})

    def test_unknown_member(self, board):
        with pytest.raises(MemberNotFoundError):
            member_records.update_profile(board, "Bob", {"team": "Ops"})


class TestGoals:

    def test_delete_goal(self, board, now):
        state, _, goal = team_details.add_goal(board, "Alice", "Lead", now=now)

        state, member = member_records.delete_goal(state, "Alice", goal.id, now=now)

        assert member.goals == []
        assert state.team_member_details["Alice"].goals == []

    def test_delete_unknown_goal(self, board):
        with pytest.raises(GoalNotFoundError):
            member_records.delete_goal(board, "Alice", "goal-missing")

    def test_add_milestone(self, board, now):
        state, _, goal = team_details.add_goal(board, "Alice", "Lead", milestones=[{"title": "Plan"}], now=now)

        state, member, milestone = member_records.add_goal_milestone(
            state, "Alice", goal.id, {"title": "Kickoff"}, now=now
        )

        assert [m.title for m in member.goals[0].milestones] == ["Plan", "Kickoff"]
        assert milestone.status == "pending"

    def test_malformed_milestone(self, board, now):
        state, _, goal = team_details.add_goal(board, "Alice", "Lead", now=now)

        with pytest.raises(ValidationFailedError, match="Invalid milestone"):
            member_records.add_goal_milestone(state, "Alice", goal.id, {"description": "no title"})


class TestClients:

    def test_add_client_creates_detail_sheet(self, board, now):
        state, member = member_records.add_client(board, "Alice", "  Acme ", now=now)

        assert member.clients == ["Acme"]
        assert member.client_details["Acme"].client_name == "Acme"
        assert member.client_details["Acme"].problems == []

    def test_add_existing_client_is_noop(self, board, now):
        state, _ = member_records.add_client(board, "Alice", "Acme", now=now)

        again, member = member_records.add_client(state, "Alice", "Acme", now=now)

        assert again is state
        assert member.clients == ["Acme"]

    def test_blank_client_rejected(self, board):
        with pytest.raises(ValidationFailedError):
            member_records.add_client(board, "Alice", " ")

    def test_remove_client_keeps_detail_sheet(self, board, now):
        state, _ = member_records.add_client(board, "Alice", "Acme", now=now)
        state, _, _ = member_records.update_client_detail(state, "Alice", "Acme", {"summary": "Renewal due"}, now=now)

        _, member = member_records.remove_client(state, "Alice", "Acme", now=now)

        assert member.clients == []
        assert member.client_details["Acme"].summary == "Renewal due"

    def test_remove_unknown_client(self, board):
        with pytest.raises(MemberRecordNotFoundError) as exc_info:
            member_records.remove_client(board, "Alice", "Globex")

        assert exc_info.value.code == "CLIENT_NOT_FOUND"

    def test_update_detail(self, board, now):
        state, _ = member_records.add_client(board, "Alice", "Acme", now=now)

        _, member, detail = member_records.update_client_detail(
            state, "Alice", "Acme", {"problems": ["Slow approvals"], "opportunities": ["Upsell"]}, now=now
        )

        assert detail.problems == ["Slow approvals"]
        assert detail.opportunities == ["Upsell"]
        assert detail.updated_at == now
        assert member.client_details["Acme"] == detail


class TestReviewCycles:

    def test_default_six_months(self, board, now):
        start = datetime(2026, 8, 31, tzinfo=timezone.utc)

        _, member, review = member_records.add_review_cycle(board, "Alice", start_date=start, now=now)

        assert review.end_date == datetime(2027, 2, 28, tzinfo=timezone.utc)
        assert review.type == "6-month"
        assert member.review_cycles == [review]

    def test_end_before_start_rejected(self, board, now):
        with pytest.raises(ValidationFailedError):
            member_records.add_review_cycle(
                board,
                "Alice",
                start_date=now,
                end_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
                now=now,
            )

    def test_update_and_delete(self, board, now):
        state, _, review = member_records.add_review_cycle(board, "Alice", now=now)

        state, _, updated = member_records.update_review_cycle(
            state, "Alice", review.id, {"rating": 4, "notes": "Strong half"}, now=now
        )
        state, member = member_records.delete_review_cycle(state, "Alice", review.id, now=now)

        assert (updated.rating, updated.notes) == (4, "Strong half")
        assert member.review_cycles == []

    def test_rating_out_of_range(self, board, now):
        state, _, review = member_records.add_review_cycle(board, "Alice", now=now)

        with pytest.raises(ValidationFailedError):
            member_records.update_review_cycle(state, "Alice", review.id, {"rating": 9}, now=now)

    def test_unknown_review(self, board):
        with pytest.raises(MemberRecordNotFoundError) as exc_info:
            member_records.delete_review_cycle(board, "Alice", "review-missing")

        assert exc_info.value.code == "REVIEW_CYCLE_NOT_FOUND"


class TestOneOnOnes:

    def test_update_keeps_derived_checkins(self, board, now):
        state, _, meeting = team_details.log_one_on_one(board, "Alice", "Roadmap", morale="good", now=now)

        _, member, updated = member_records.update_one_on_one(
            state, "Alice", meeting.id, {"action_items": ["Share doc"], "notes": "Follow up Friday"}, now=now
        )

        assert updated.action_items == ["Share doc"]
        assert updated.discussion_notes == "Roadmap"
        assert len(member.morale_check_ins) == 1

    def test_delete(self, board, now):
        state, _, meeting = team_details.log_one_on_one(board, "Alice", "Roadmap", now=now)

        _, member = member_records.delete_one_on_one(state, "Alice", meeting.id, now=now)

        assert member.one_on_ones == []

    def test_unknown_meeting(self, board):
        with pytest.raises(MemberRecordNotFoundError):
            member_records.update_one_on_one(board, "Alice", "oneonone-missing", {"notes": "x"})


class TestGrowthGoals:

    def test_sync_adds_matching_goals_once(self, catalogue, now):
        state, senior_ids = catalogue
        state, _ = member_records.update_profile(state, "Alice", {"discipline": "Design", "level": "Senior"}, now=now)

        state, member, added = member_records.sync_growth_goals(state, "Alice", now=now)
        again, _, added_again = member_records.sync_growth_goals(state, "Alice", now=now)

        assert [g.goal_id for g in added] == senior_ids
        assert [g.goal_id for g in member.growth_goals] == senior_ids
        assert again is state
        assert added_again == []

    def test_sync_falls_back_to_team(self, catalogue, now):
        state, senior_ids = catalogue
        state, _ = member_records.update_profile(state, "Alice", {"team": "Design", "level": "Senior"}, now=now)

        _, member, _ = member_records.sync_growth_goals(state, "Alice", now=now)

        assert [g.goal_id for g in member.growth_goals] == senior_ids

    def test_sync_without_level_adds_nothing(self, catalogue, now):
        state, _ = catalogue

        same, _, added = member_records.sync_growth_goals(state, "Alice", now=now)

        assert same is state
        assert added == []

    def test_weekly_rating(self, catalogue, now):
        state, senior_ids = catalogue
        state, _ = member_records.update_profile(state, "Alice", {"discipline": "Design", "level": "Senior"}, now=now)
        state, _, _ = member_records.sync_growth_goals(state, "Alice", now=now)
        earlier = datetime(2026, 2, 25, 9, 0, tzinfo=timezone.utc)
        state, _, _ = member_records.rate_growth_goal(state, "Alice", senior_ids[0], 2, now=earlier)

        _, member, rating = member_records.rate_growth_goal(state, "Alice", senior_ids[0], 4, "Better", now=now)

        goal = member.growth_goals[0]
        # 2026-03-10 is a Tuesday
        assert rating.week_start_date == datetime(2026, 3, 9, tzinfo=timezone.utc)
        assert [r.rating for r in goal.ratings] == [4, 2]
        assert goal.current_rating == 4

    def test_rating_out_of_range(self, catalogue, now):
        state, senior_ids = catalogue
        state, _ = member_records.update_profile(state, "Alice", {"discipline": "Design", "level": "Senior"}, now=now)
        state, _, _ = member_records.sync_growth_goals(state, "Alice", now=now)

        with pytest.raises(ValidationFailedError):
            member_records.rate_growth_goal(state, "Alice", senior_ids[0], 6, now=now)

    def test_rating_untracked_goal(self, board):
        with pytest.raises(MemberRecordNotFoundError):
            member_records.rate_growth_goal(board, "Alice", "role-goal-missing", 3)


class TestRoleGoalCatalogue:

    def test_filter(self, catalogue):
        state, senior_ids = catalogue

        assert [g.id for g in role_goals.list_role_goals(state, "Design", "Senior")] == senior_ids
        assert len(role_goals.list_role_goals(state, discipline="Design")) == 3
        assert role_goals.list_role_goals(state, level="Director") == []

    def test_missing_fields(self, board):
        with pytest.raises(ValidationFailedError, match="Missing required fields: level"):
            role_goals.create_role_goal(board, {"discipline": "Design", "title": "Mentor"})

    def test_update(self, catalogue, now):
        state, senior_ids = catalogue

        _, goal = role_goals.update_role_goal(state, senior_ids[0], {"category": "Leadership"}, now=now)

        assert goal.category == "Leadership"
        assert goal.title == "Mentor juniors"

    def test_update_cannot_blank_title(self, catalogue):
        state, senior_ids = catalogue

        with pytest.raises(ValidationFailedError):
            role_goals.update_role_goal(state, senior_ids[0], {"title": "  "})

    def test_delete_keeps_member_ratings(self, catalogue, now):
        state, senior_ids = catalogue
        state, _ = member_records.update_profile(state, "Alice", {"discipline": "Design", "level": "Senior"}, now=now)
        state, _, _ = member_records.sync_growth_goals(state, "Alice", now=now)

        state = role_goals.delete_role_goal(state, senior_ids[0])

        assert [g.id for g in state.role_growth_goals if g.id in senior_ids] == [senior_ids[1]]
        assert len(state.team_member_details["Alice"].growth_goals) == 2

    def test_delete_unknown(self, board):
        with pytest.raises(RoleGoalNotFoundError):
            role_goals.delete_role_goal(board, "role-goal-missing")
