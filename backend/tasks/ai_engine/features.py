# tasks/ai_engine/features.py
"""
Signal aggregation for the AI engine.

Two leaf builders live here:

- `build_feature_vector`: burnout signals for one user (GitHub activity +
  task workload), recomputed on every non-cached scoring call.
- `build_task_features`: the per-task record handed to the prioritizer.

Neither function writes anything.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List, Optional

from django.db.models import F
from django.utils import timezone

from burnout.models import GithubActivity
from ..models import Task, TaskStatus

# Number of commit messages embedded in the burnout prompt
RECENT_COMMITS_LIMIT = 20

SECONDS_PER_HOUR = 3600.0


@dataclass(frozen=True)
class BurnoutFeatures:
    """Feature vector for one burnout computation."""

    commits_count: int = 0
    recent_commit_messages: List[str] = field(default_factory=list)
    pull_requests_count: int = 0
    issues_count: int = 0
    tasks_in_progress: int = 0
    completed_tasks: int = 0
    overdue_tasks: int = 0
    total_tasks: int = 0

    def to_factors(self) -> Dict[str, int]:
        """Snapshot persisted on BurnoutScore.factors."""
        return {
            "commitsCount": self.commits_count,
            "tasksInProgress": self.tasks_in_progress,
            "completedTasks": self.completed_tasks,
            "overdueTasks": self.overdue_tasks,
            "pullRequestsCount": self.pull_requests_count,
        }


def _latest_activity(user_id, project_id=None) -> Optional[GithubActivity]:
    qs = GithubActivity.objects.filter(user_id=user_id)
    if project_id:
        qs = qs.filter(project_id=project_id)
    return qs.order_by(F("last_synced").desc(nulls_last=True), "-id").first()


def build_feature_vector(
    user_id,
    project_id=None,
    now: Optional[datetime.datetime] = None,
) -> BurnoutFeatures:
    """
    Derive the burnout feature vector for a user, optionally scoped to a project.

    A user without any synced GitHub activity simply gets zero GitHub counts.
    """
    now = now or timezone.now()

    activity = _latest_activity(user_id, project_id)
    commits = list(activity.commits or []) if activity else []
    pull_requests = list(activity.pull_requests or []) if activity else []
    issues = list(activity.issues or []) if activity else []

    messages = []
    for commit in commits[:RECENT_COMMITS_LIMIT]:
        if isinstance(commit, dict):
            message = commit.get("message")
            if message:
                messages.append(str(message))

    task_qs = Task.objects.filter(assigned_to_id=user_id)
    if project_id:
        task_qs = task_qs.filter(project_id=project_id)

    tasks = list(task_qs.only("status", "due_date"))
    open_statuses = TaskStatus.open_values()

    in_progress = sum(1 for t in tasks if t.status in open_statuses)
    completed = sum(1 for t in tasks if t.status == TaskStatus.DONE)
    overdue = sum(
        1 for t in tasks
        if t.due_date is not None and t.due_date < now and t.status != TaskStatus.DONE
    )

    return BurnoutFeatures(
        commits_count=len(commits),
        recent_commit_messages=messages,
        pull_requests_count=len(pull_requests),
        issues_count=len(issues),
        tasks_in_progress=in_progress,
        completed_tasks=completed,
        overdue_tasks=overdue,
        total_tasks=len(tasks),
    )


# ---------------------------------------------------------------------------
# Task features (prioritizer)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TaskFeatures:
    """Per-task record sent to the oracle for ordering."""

    index: int
    id: str
    title: str
    description: str
    status: str
    priority: str
    estimated_hours: float
    due_date: Optional[str]
    hours_until_due: float
    is_overdue: bool
    started_at: Optional[str]
    hours_in_progress: Optional[float]
    project_name: str

    def to_prompt_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        return {
            "index": data["index"],
            "id": data["id"],
            "title": data["title"],
            "description": data["description"],
            "status": data["status"],
            "priority": data["priority"],
            "estimatedHours": data["estimated_hours"],
            "dueDate": data["due_date"],
            "hoursUntilDue": data["hours_until_due"],
            "daysUntilDue": round(data["hours_until_due"] / 24, 1),
            "isOverdue": data["is_overdue"],
            "startedAt": data["started_at"],
            "hoursInProgress": data["hours_in_progress"],
            "projectName": data["project_name"],
        }


def _iso(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def build_task_features(
    tasks: Iterable[Task],
    now: Optional[datetime.datetime] = None,
) -> List[TaskFeatures]:
    """
    Build prioritizer records; `index` is the position in the given ordering.
    """
    now = now or timezone.now()
    records: List[TaskFeatures] = []

    for index, task in enumerate(tasks):
        due = task.effective_due_date
        hours_until_due = max(0.0, (due - now).total_seconds() / SECONDS_PER_HOUR) if due else 0.0
        is_overdue = bool(due and due < now)

        hours_in_progress = None
        if task.started_at:
            hours_in_progress = round((now - task.started_at).total_seconds() / SECONDS_PER_HOUR, 1)

        project = getattr(task, "project", None)

        records.append(
            TaskFeatures(
                index=index,
                id=str(task.pk),
                title=task.title,
                description=task.description or "",
                status=task.status,
                priority=task.priority,
                estimated_hours=float(task.estimate_hours or 0),
                due_date=_iso(due),
                hours_until_due=round(hours_until_due, 1),
                is_overdue=is_overdue,
                started_at=_iso(task.started_at),
                hours_in_progress=hours_in_progress,
                project_name=(project.name if project else None) or "Unknown",
            )
        )

    return records
