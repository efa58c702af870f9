"""Daily check-in drafts and goal snapshots."""

from dataclasses import dataclass, field, replace
from uuid import uuid4

from coach_checkins.domain.errors import DraftIncompleteError
from coach_checkins.domain.models import CompletedGoal, GoalItem, ImageUpload


@dataclass
class DailyCheckinDraft:
    """A daily check-in staged on the client before submission."""

    user_id: str
    completed_goals: list[CompletedGoal] = field(default_factory=list)
    notes: str = ""
    images: list[ImageUpload] = field(default_factory=list)
    image_urls: list[str] = field(default_factory=list)

    @property
    def photo_count(self) -> int:
        return len(self.images) + len(self.image_urls)

    def set_completed(self, goal_id: str, completed: bool) -> None:
        """Mark a goal as done or not done."""
        self.completed_goals = [
            replace(goal, completed=completed) if goal.goal_id == goal_id else goal
            for goal in self.completed_goals
        ]


def snapshot_goals(goals: list[GoalItem]) -> list[CompletedGoal]:
    """Copy the configured goals into unchecked check-in entries."""
    return [
        CompletedGoal(
            id=str(uuid4()),
            goal_id=goal.goal_id,
            name=goal.name,
            completed=False,
        )
        for goal in goals
    ]


def draft_from_goals(user_id: str, goals: list[GoalItem]) -> DailyCheckinDraft:
    """Start a draft from the user's current goal set."""
    return DailyCheckinDraft(user_id=user_id, completed_goals=snapshot_goals(goals))


def validate_draft(draft: DailyCheckinDraft) -> None:
    """Raise when the draft cannot be submitted yet."""
    if not draft.completed_goals:
        raise DraftIncompleteError("A daily check-in needs at least one goal")
    if draft.photo_count < 1:
        raise DraftIncompleteError("A daily check-in needs at least one photo")


def merge_goals(
    existing: list[CompletedGoal], edited: list[CompletedGoal]
) -> list[CompletedGoal]:
    """Apply edited goal entries without dropping any existing ones.

    Entries are matched by ``goal_id``; edited goals the record did not have
    yet are appended in the order given.
    """
    edits = {goal.goal_id: goal for goal in edited}
    merged = []
    for goal in existing:
        update = edits.pop(goal.goal_id, None)
        if update is None:
            merged.append(goal)
        else:
            merged.append(replace(goal, name=update.name, completed=update.completed))
    for goal in edited:
        if goal.goal_id in edits:
            entry = goal if goal.id else replace(goal, id=str(uuid4()))
            merged.append(entry)
            edits.pop(goal.goal_id)
    return merged
