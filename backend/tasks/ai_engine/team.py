# tasks/ai_engine/team.py
"""
Team-level views over the burnout pipeline.

- `get_team_burnout`: runs the per-user pipeline for every unique member of
  every team a manager runs and summarizes the results.
- `get_team_daily_hours`: hours worked per day over the trailing 28 days,
  derived from completed tasks (feeds the dashboard heatmap).
"""

from __future__ import annotations

import datetime
import logging
import math
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from django.utils import timezone

from teams.models import Team
from ..models import Task, TaskStatus
from .exceptions import TeamNotFoundError
from .orchestrator import BurnoutOrchestrator

logger = logging.getLogger(__name__)

HOURS_WINDOW_DAYS = 28
MEMBER_ERROR_MARKER = "Failed to calculate"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _managed_teams(manager_id) -> List[Team]:
    teams = list(Team.objects.filter(manager_id=manager_id).prefetch_related("members"))
    if not teams:
        raise TeamNotFoundError(manager_id)
    return teams


def unique_members(teams) -> List[Any]:
    """Members across all teams, first occurrence wins, each user once."""
    seen = OrderedDict()
    for team in teams:
        for member in team.members.all():
            seen.setdefault(member.pk, member)
    return list(seen.values())


def _member_entry(member, score) -> Dict[str, Any]:
    return {
        "userId": member.pk,
        "name": member.display_name,
        "email": member.email,
        "role": member.role,
        "githubUsername": member.github_username,
        "score": score.score,
        "riskLevel": score.risk_level,
        "factors": score.factors,
        "analysis": score.analysis,
        "recommendations": score.recommendations,
        "lastUpdated": score.created_at,
    }


def _failed_member_entry(member) -> Dict[str, Any]:
    return {
        "userId": member.pk,
        "name": member.display_name,
        "email": member.email,
        "role": member.role,
        "score": 0,
        "riskLevel": "low",
        "error": MEMBER_ERROR_MARKER,
    }


def get_team_burnout(
    manager_id,
    force_refresh: bool = False,
    orchestrator: Optional[BurnoutOrchestrator] = None,
) -> Dict[str, Any]:
    """
    Summarize burnout for everyone the manager is responsible for.

    One member failing is recorded with score 0 and an error marker; it
    never aborts the rest of the team.

    Raises:
        TeamNotFoundError: the manager has no teams.
    """
    teams = _managed_teams(manager_id)
    members = unique_members(teams)
    orchestrator = orchestrator or BurnoutOrchestrator()

    entries: List[Dict[str, Any]] = []
    for member in members:
        try:
            score = orchestrator.get_or_compute_score(member.pk, force_refresh=force_refresh)
            entries.append(_member_entry(member, score))
        except Exception as e:
            logger.exception(f"Team burnout: failed to score member {member.pk} for manager {manager_id}: {e}")
            entries.append(_failed_member_entry(member))

    entries.sort(key=lambda m: m.get("score") or 0, reverse=True)

    team_size = len(entries)
    average = sum(m.get("score") or 0 for m in entries) / team_size if team_size else 0

    return {
        "managerId": manager_id,
        "teamSize": team_size,
        "averageScore": _round_half_up(average),
        "riskDistribution": {
            "high": sum(1 for m in entries if m["riskLevel"] == "high"),
            "medium": sum(1 for m in entries if m["riskLevel"] == "medium"),
            "low": sum(1 for m in entries if m["riskLevel"] == "low"),
        },
        "members": entries,
    }


def get_team_daily_hours(
    manager_id,
    now: Optional[datetime.datetime] = None,
) -> Dict[str, Any]:
    """
    Hours of completed work per UTC day over the trailing 28 days.

    A task contributes (completed_at - started_at) to the day it was
    completed; tasks missing either timestamp are skipped. Days without
    completions report 0.

    Raises:
        TeamNotFoundError: the manager has no teams.
    """
    teams = _managed_teams(manager_id)
    member_ids = [m.pk for m in unique_members(teams)]

    now = now or timezone.now()
    today = now.astimezone(datetime.timezone.utc).date()
    period_start = today - datetime.timedelta(days=HOURS_WINDOW_DAYS)
    window_start = datetime.datetime.combine(period_start, datetime.time.min, tzinfo=datetime.timezone.utc)

    buckets: Dict[datetime.date, float] = OrderedDict(
        (today - datetime.timedelta(days=offset), 0.0)
        for offset in range(HOURS_WINDOW_DAYS - 1, -1, -1)
    )

    tasks = Task.objects.filter(
        assigned_to_id__in=member_ids,
        status=TaskStatus.DONE,
        completed_at__gte=window_start,
        started_at__isnull=False,
    ).only("started_at", "completed_at")

    for task in tasks:
        day = task.completed_at.astimezone(datetime.timezone.utc).date()
        if day in buckets:
            duration = (task.completed_at - task.started_at).total_seconds() / 3600.0
            buckets[day] += duration

    return {
        "managerId": manager_id,
        "period": {
            "start": period_start.isoformat(),
            "end": today.isoformat(),
        },
        "dailyHours": [
            {
                "date": day.isoformat(),
                "hours": round(hours, 1),
                "dayOfWeek": day.strftime("%a"),
            }
            for day, hours in buckets.items()
        ],
    }
