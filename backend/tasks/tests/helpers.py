# tasks/tests/helpers.py
"""
Shared fixtures for the tasks test suite.

`FakeProvider` stands in for OpenAIProvider: it replays scripted outcomes
per model and records every call, so fallover order and retry counts can
be asserted without touching the network.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from django.contrib.auth import get_user_model

from teams.models import Project, Team
from tasks.ai_engine.exceptions import ProviderError, ProviderErrorKind
from tasks.models import Task, TaskPriority, TaskStatus

User = get_user_model()

Outcome = Union[str, BaseException]


class FakeProvider:
    """
    Scripted provider.

    Each model maps to a list of outcomes consumed in order; the last one
    repeats once the list runs out. Models without a script fail with a
    TRANSPORT error.
    """

    def __init__(self, script: Optional[Dict[str, Sequence[Outcome]]] = None) -> None:
        self.script = {model: list(outcomes) for model, outcomes in (script or {}).items()}
        self.calls: List[str] = []
        self.prompts: List[str] = []

    def generate_content(self, model_id: str, prompt: str) -> str:
        self.calls.append(model_id)
        self.prompts.append(prompt)

        outcomes = self.script.get(model_id)
        if not outcomes:
            raise ProviderError(ProviderErrorKind.TRANSPORT, f"{model_id} unavailable")

        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def rate_limited() -> ProviderError:
    return ProviderError(ProviderErrorKind.RATE_LIMITED, "quota exceeded")


def transport_error() -> ProviderError:
    return ProviderError(ProviderErrorKind.TRANSPORT, "connection reset")


def burnout_json(
    score: Any = 55,
    analysis: str = "Steady workload with some overdue items",
    recommendations: Optional[List[str]] = None,
    **extra: Any,
) -> str:
    """A burnout payload as a model would return it."""
    payload = {
        "score": score,
        "riskLevel": "medium",
        "analysis": analysis,
        "recommendations": recommendations if recommendations is not None else ["Pair on reviews"],
    }
    payload.update(extra)
    return json.dumps(payload)


def ranking_json(indices: Any, reasoning: str = "Deadlines first") -> str:
    return json.dumps({"sortedIndices": indices, "reasoning": reasoning})


def create_test_user(username: str = "testuser", **extra: Any) -> User:
    """Create a test user with unique username."""
    return User.objects.create_user(
        email=f"{username}@example.com",
        password="testpass123",
        username=username,
        **extra,
    )


def create_test_team(manager: User, members: Sequence[User] = (), name: str = "Platform") -> Team:
    team = Team.objects.create(name=name, manager=manager)
    team.members.set(members)
    return team


def create_test_project(team: Optional[Team] = None, name: str = "Dashboard") -> Project:
    return Project.objects.create(name=name, team=team)


def create_test_task(
    project: Project,
    assignee: Optional[User] = None,
    title: str = "Test Task",
    status: str = TaskStatus.TODO,
    priority: str = TaskPriority.MEDIUM,
    due_date: Optional[datetime] = None,
    **extra: Any,
) -> Task:
    """Create a test task in the given project."""
    return Task.objects.create(
        project=project,
        assigned_to=assignee,
        title=title,
        status=status,
        priority=priority,
        due_date=due_date,
        **extra,
    )
