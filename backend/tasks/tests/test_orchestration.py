# tasks/tests/test_orchestration.py
"""
AI Orchestration Integration Tests
==================================

This module contains integration tests for the burnout and prioritization
pipelines, from the ORM down to a faked AI provider.

Test Philosophy:
----------------
- Fake the provider (never the OpenAI API) to avoid costs and flakiness
- Test the full flow from the orchestrator or Celery task to database rows
- Verify AI failures always degrade to the deterministic fallbacks
- Verify append-only persistence and the freshness window

Test Categories:
----------------
1. Score Cache Tests - Reuse inside the window, forceRefresh, expiry
2. Team Aggregation Tests - Deduplication, member failure, summary math
3. Daily Hours Tests - Heatmap buckets from completed tasks
4. Prioritizer Tests - AI permutation, invalid output, empty input
5. Celery Task Tests - Background cache warming
"""

from __future__ import annotations

import datetime
from types import SimpleNamespace
from typing import Any, Dict
from unittest.mock import MagicMock, patch

from django.test import TestCase, TransactionTestCase

from burnout.models import BurnoutScore
from tasks.ai_engine.cache import BurnoutScoreCache
from tasks.ai_engine.celery_tasks import refresh_burnout_score
from tasks.ai_engine.exceptions import TeamNotFoundError
from tasks.ai_engine.oracle import ScoringOracle
from tasks.ai_engine.orchestrator import BurnoutOrchestrator
from tasks.ai_engine.prioritizer import EMPTY_MESSAGE, FALLBACK_REASONING, TaskPrioritizer
from tasks.ai_engine.team import (
    MEMBER_ERROR_MARKER,
    get_team_burnout,
    get_team_daily_hours,
)
from tasks.models import TaskPriority, TaskStatus

from .helpers import (
    FakeProvider,
    burnout_json,
    create_test_project,
    create_test_task,
    create_test_team,
    create_test_user,
    ranking_json,
)

UTC = datetime.timezone.utc


def make_oracle(provider: FakeProvider) -> ScoringOracle:
    """Oracle with two burnout candidates and one ranking candidate, no real sleeping."""
    return ScoringOracle(
        provider=provider,
        burnout_models=["model-a", "model-b"],
        prioritizer_models=["ranker"],
        max_quota_retries=2,
        backoff_seconds=2,
        sleep=lambda seconds: None,
    )


# ===========================================================================
# SCORE CACHE TESTS
# ===========================================================================


class TestBurnoutScoreCache(TestCase):
    """Tests for get_or_compute_score and the 60-minute freshness window."""

    def setUp(self) -> None:
        self.user = create_test_user("cached_user")
        self.provider = FakeProvider({"model-a": [burnout_json(score=64)]})
        self.orchestrator = BurnoutOrchestrator(oracle=make_oracle(self.provider))

    def test_second_call_inside_window_returns_same_record(self) -> None:
        """Two calls within the window share one row and one model call."""
        first = self.orchestrator.get_or_compute_score(self.user.pk)
        second = self.orchestrator.get_or_compute_score(self.user.pk)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(BurnoutScore.objects.count(), 1)
        self.assertEqual(self.provider.calls, ["model-a"])

    def test_force_refresh_always_creates_new_record(self) -> None:
        """forceRefresh bypasses the cache even inside the window."""
        first = self.orchestrator.get_or_compute_score(self.user.pk)
        second = self.orchestrator.get_or_compute_score(self.user.pk, force_refresh=True)

        self.assertNotEqual(first.pk, second.pk)
        self.assertEqual(BurnoutScore.objects.filter(user=self.user).count(), 2)

        # The newest row is what the next cached read returns
        third = self.orchestrator.get_or_compute_score(self.user.pk)
        self.assertEqual(third.pk, second.pk)

    def test_stored_record_contents(self) -> None:
        """The persisted row carries the oracle result and the ISO week bucket."""
        now = datetime.datetime(2024, 1, 3, 9, 0, tzinfo=UTC)

        record = self.orchestrator.get_or_compute_score(self.user.pk, now=now)

        self.assertEqual(record.score, 64)
        self.assertEqual(record.risk_level, "medium")
        self.assertEqual(record.model_used, "model-a")
        self.assertEqual(record.week, 1)
        self.assertEqual(record.year, 2024)
        self.assertEqual(record.factors["commitsCount"], 0)
        self.assertEqual(record.recommendations, ["Pair on reviews"])

    def test_expired_score_is_recomputed(self) -> None:
        """A row older than the window is ignored."""
        first = self.orchestrator.get_or_compute_score(self.user.pk)
        BurnoutScore.objects.filter(pk=first.pk).update(
            created_at=first.created_at - datetime.timedelta(minutes=61)
        )

        second = self.orchestrator.get_or_compute_score(self.user.pk)

        self.assertNotEqual(first.pk, second.pk)

    def test_project_scoped_lookup(self) -> None:
        """With a project, only scores for that project are reused."""
        project = create_test_project(name="Dashboard")
        unscoped = self.orchestrator.get_or_compute_score(self.user.pk)

        scoped = self.orchestrator.get_or_compute_score(self.user.pk, project.pk)

        self.assertNotEqual(unscoped.pk, scoped.pk)
        self.assertEqual(scoped.project_id, project.pk)
        self.assertEqual(
            BurnoutScoreCache().get_fresh(self.user.pk, project.pk).pk,
            scoped.pk,
        )

    def test_all_models_failing_persists_fallback(self) -> None:
        """AI unavailability never fails the call; the heuristic result is stored."""
        orchestrator = BurnoutOrchestrator(oracle=make_oracle(FakeProvider()))
        project = create_test_project(name="Dashboard")
        for _ in range(6):
            create_test_task(project, self.user, status=TaskStatus.IN_PROGRESS)

        record = orchestrator.get_or_compute_score(self.user.pk)

        self.assertEqual(record.model_used, "fallback")
        self.assertEqual(record.score, 25)
        self.assertEqual(record.risk_level, "low")
        self.assertEqual(record.analysis, "Fallback calculation used due to AI error")
        self.assertEqual(record.factors["pullRequestsCount"], 0)


# ===========================================================================
# TEAM AGGREGATION TESTS
# ===========================================================================


class StubOrchestrator:
    """Returns canned scores per user; users in `failing` raise."""

    def __init__(self, scores: Dict[int, int], failing=()) -> None:
        self.scores = scores
        self.failing = set(failing)
        self.calls = []

    def get_or_compute_score(self, user_id, project_id=None, force_refresh=False, now=None) -> Any:
        self.calls.append(user_id)
        if user_id in self.failing:
            raise RuntimeError("database went away")
        score = self.scores.get(user_id, 0)
        return SimpleNamespace(
            score=score,
            risk_level="high" if score >= 70 else "medium" if score >= 40 else "low",
            factors={},
            analysis="",
            recommendations=[],
            created_at=None,
        )


class TestTeamBurnout(TestCase):
    """Tests for get_team_burnout."""

    def setUp(self) -> None:
        self.manager = create_test_user("manager", role="manager")
        self.alice = create_test_user("alice", first_name="Alice")
        self.bob = create_test_user("bob", first_name="Bob")
        self.carol = create_test_user("carol", first_name="Carol")

    def test_manager_without_teams_raises(self) -> None:
        with self.assertRaises(TeamNotFoundError):
            get_team_burnout(self.manager.pk, orchestrator=StubOrchestrator({}))

    def test_overlapping_teams_score_each_member_once(self) -> None:
        """A member on two teams appears (and is scored) exactly once."""
        create_test_team(self.manager, [self.alice, self.bob], name="Frontend")
        create_test_team(self.manager, [self.bob, self.carol], name="Backend")
        orchestrator = BurnoutOrchestrator(oracle=make_oracle(FakeProvider()))

        summary = get_team_burnout(self.manager.pk, orchestrator=orchestrator)

        member_ids = [m["userId"] for m in summary["members"]]
        self.assertEqual(sorted(member_ids), sorted([self.alice.pk, self.bob.pk, self.carol.pk]))
        self.assertEqual(summary["teamSize"], 3)
        self.assertEqual(BurnoutScore.objects.count(), 3)

    def test_failed_member_does_not_abort_batch(self) -> None:
        """The failing member gets score 0, low risk and an error marker."""
        create_test_team(self.manager, [self.alice, self.bob, self.carol])
        stub = StubOrchestrator({self.alice.pk: 80, self.carol.pk: 45}, failing=[self.bob.pk])

        summary = get_team_burnout(self.manager.pk, orchestrator=stub)

        by_id = {m["userId"]: m for m in summary["members"]}
        self.assertEqual(by_id[self.alice.pk]["score"], 80)
        self.assertEqual(by_id[self.carol.pk]["score"], 45)
        self.assertEqual(by_id[self.bob.pk]["score"], 0)
        self.assertEqual(by_id[self.bob.pk]["riskLevel"], "low")
        self.assertEqual(by_id[self.bob.pk]["error"], MEMBER_ERROR_MARKER)
        self.assertNotIn("error", by_id[self.alice.pk])

    def test_summary_sorting_average_and_distribution(self) -> None:
        """Members sorted by score descending; average rounds half up."""
        create_test_team(self.manager, [self.alice, self.bob])
        stub = StubOrchestrator({self.alice.pk: 45, self.bob.pk: 70})

        summary = get_team_burnout(self.manager.pk, orchestrator=stub)

        self.assertEqual([m["userId"] for m in summary["members"]], [self.bob.pk, self.alice.pk])
        self.assertEqual(summary["averageScore"], 58)
        self.assertEqual(summary["riskDistribution"], {"high": 1, "medium": 1, "low": 0})
        self.assertEqual(summary["managerId"], self.manager.pk)
        self.assertEqual(summary["members"][0]["name"], "Bob")

    def test_empty_team_averages_zero(self) -> None:
        create_test_team(self.manager, [])

        summary = get_team_burnout(self.manager.pk, orchestrator=StubOrchestrator({}))

        self.assertEqual(summary["teamSize"], 0)
        self.assertEqual(summary["averageScore"], 0)
        self.assertEqual(summary["members"], [])

    def test_force_refresh_is_forwarded(self) -> None:
        create_test_team(self.manager, [self.alice])
        orchestrator = MagicMock()
        orchestrator.get_or_compute_score.return_value = SimpleNamespace(
            score=10, risk_level="low", factors={}, analysis="", recommendations=[], created_at=None
        )

        get_team_burnout(self.manager.pk, force_refresh=True, orchestrator=orchestrator)

        orchestrator.get_or_compute_score.assert_called_once_with(self.alice.pk, force_refresh=True)


# ===========================================================================
# DAILY HOURS TESTS
# ===========================================================================


class TestTeamDailyHours(TestCase):
    """Tests for the 28-day heatmap aggregation."""

    def setUp(self) -> None:
        self.manager = create_test_user("manager", role="manager")
        self.dev = create_test_user("dev")
        create_test_team(self.manager, [self.dev])
        self.project = create_test_project(name="Dashboard")
        self.now = datetime.datetime(2024, 1, 2, 12, 0, tzinfo=UTC)

    def test_completed_task_lands_in_completion_day(self) -> None:
        """10:00 -> 13:30 on 2024-01-01 contributes 3.5 hours to that day only."""
        create_test_task(
            self.project, self.dev, status=TaskStatus.DONE,
            started_at=datetime.datetime(2024, 1, 1, 10, 0, tzinfo=UTC),
            completed_at=datetime.datetime(2024, 1, 1, 13, 30, tzinfo=UTC),
        )

        result = get_team_daily_hours(self.manager.pk, now=self.now)

        days = result["dailyHours"]
        self.assertEqual(len(days), 28)
        self.assertEqual(days[-1]["date"], "2024-01-02")
        self.assertEqual(days[0]["date"], "2023-12-06")

        non_zero = [d for d in days if d["hours"]]
        self.assertEqual(non_zero, [{"date": "2024-01-01", "hours": 3.5, "dayOfWeek": "Mon"}])
        self.assertEqual(result["period"], {"start": "2023-12-05", "end": "2024-01-02"})

    def test_unfinished_and_out_of_window_tasks_ignored(self) -> None:
        """Open tasks, tasks never started and old completions add nothing."""
        create_test_task(
            self.project, self.dev, status=TaskStatus.IN_PROGRESS,
            started_at=datetime.datetime(2024, 1, 1, 8, 0, tzinfo=UTC),
        )
        create_test_task(
            self.project, self.dev, status=TaskStatus.DONE,
            completed_at=datetime.datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
        )
        create_test_task(
            self.project, self.dev, status=TaskStatus.DONE,
            started_at=datetime.datetime(2023, 10, 1, 8, 0, tzinfo=UTC),
            completed_at=datetime.datetime(2023, 10, 1, 9, 0, tzinfo=UTC),
        )

        result = get_team_daily_hours(self.manager.pk, now=self.now)

        self.assertTrue(all(d["hours"] == 0 for d in result["dailyHours"]))

    def test_manager_without_teams_raises(self) -> None:
        with self.assertRaises(TeamNotFoundError):
            get_team_daily_hours(self.dev.pk, now=self.now)


# ===========================================================================
# PRIORITIZER TESTS
# ===========================================================================


class TestTaskPrioritizer(TestCase):
    """Tests for TaskPrioritizer.prioritize."""

    def setUp(self) -> None:
        self.user = create_test_user("dev")
        self.project = create_test_project(name="Dashboard")
        now = datetime.datetime.now(UTC)
        self.low_far = create_test_task(
            self.project, self.user, title="Docs", priority=TaskPriority.LOW,
            due_date=now + datetime.timedelta(days=10),
        )
        self.high_soon = create_test_task(
            self.project, self.user, title="Release", priority=TaskPriority.HIGH,
            due_date=now + datetime.timedelta(days=5),
        )
        self.overdue = create_test_task(
            self.project, self.user, title="Hotfix", priority=TaskPriority.MEDIUM,
            due_date=now - datetime.timedelta(days=1),
        )
        self.task_ids = [str(t.pk) for t in (self.low_far, self.high_soon, self.overdue)]

    def test_oracle_permutation_is_mapped_to_task_ids(self) -> None:
        """[2, 0, 1] maps back onto the creation-ordered task ids."""
        provider = FakeProvider({"ranker": [ranking_json([2, 0, 1], "Hotfix first")]})

        result = TaskPrioritizer(oracle=make_oracle(provider)).prioritize(self.user.pk)

        self.assertEqual(
            result["sortedTaskIds"],
            [self.task_ids[2], self.task_ids[0], self.task_ids[1]],
        )
        self.assertEqual(result["reasoning"], "Hotfix first")
        self.assertEqual(result["tasksAnalyzed"], 3)
        self.assertEqual(provider.calls, ["ranker"])

    def test_invalid_length_uses_fallback_order(self) -> None:
        """A 2-element answer for 3 tasks is rejected; overdue goes first."""
        provider = FakeProvider({"ranker": [ranking_json([1, 0])]})

        result = TaskPrioritizer(oracle=make_oracle(provider)).prioritize(self.user.pk)

        self.assertEqual(
            result["sortedTaskIds"],
            [str(self.overdue.pk), str(self.high_soon.pk), str(self.low_far.pk)],
        )
        self.assertEqual(result["reasoning"], FALLBACK_REASONING)

    def test_unparseable_answer_uses_fallback_order(self) -> None:
        provider = FakeProvider({"ranker": ["Sure! Do the hotfix first."]})

        result = TaskPrioritizer(oracle=make_oracle(provider)).prioritize(self.user.pk)

        self.assertEqual(result["sortedTaskIds"][0], str(self.overdue.pk))
        self.assertEqual(result["reasoning"], FALLBACK_REASONING)

    def test_completed_and_foreign_tasks_are_excluded(self) -> None:
        """Only the user's open tasks are ranked."""
        create_test_task(self.project, self.user, title="Shipped", status=TaskStatus.DONE)
        create_test_task(self.project, create_test_user("other"), title="Not mine")
        provider = FakeProvider({"ranker": [ranking_json([0, 1, 2])]})

        result = TaskPrioritizer(oracle=make_oracle(provider)).prioritize(self.user.pk)

        self.assertEqual(result["tasksAnalyzed"], 3)
        self.assertEqual(result["sortedTaskIds"], self.task_ids)

    def test_no_open_tasks_skips_oracle(self) -> None:
        """Zero open tasks: empty ordering, explanatory message, no AI call."""
        idle = create_test_user("idle")
        provider = FakeProvider({"ranker": [ranking_json([])]})

        result = TaskPrioritizer(oracle=make_oracle(provider)).prioritize(idle.pk)

        self.assertEqual(result["sortedTaskIds"], [])
        self.assertEqual(result["tasksAnalyzed"], 0)
        self.assertEqual(result["message"], EMPTY_MESSAGE)
        self.assertEqual(provider.calls, [])


# ===========================================================================
# CELERY TASK TESTS
# ===========================================================================


class TestRefreshBurnoutScoreTask(TransactionTestCase):
    """
    Tests for the refresh_burnout_score Celery task.

    Uses TransactionTestCase because Celery tasks may use
    transaction.atomic() which behaves differently in TestCase.
    """

    def setUp(self) -> None:
        self.user = create_test_user("celery_user")

    @patch("tasks.ai_engine.celery_tasks.BurnoutOrchestrator")
    def test_refresh_forces_new_score(self, mock_orchestrator_class: MagicMock) -> None:
        """The worker always bypasses the cache for the given user."""
        mock_orchestrator = MagicMock()
        mock_orchestrator_class.return_value = mock_orchestrator
        mock_orchestrator.get_or_compute_score.return_value = SimpleNamespace(
            pk=11, score=42, risk_level="medium", model_used="fallback"
        )

        result = refresh_burnout_score.apply(args=[self.user.pk]).get()

        mock_orchestrator.get_or_compute_score.assert_called_once_with(
            self.user.pk, project_id=None, force_refresh=True
        )
        self.assertEqual(
            result,
            {"id": 11, "score": 42, "riskLevel": "medium", "modelUsed": "fallback"},
        )

    def test_refresh_persists_row_end_to_end(self) -> None:
        """With AI unavailable the worker still stores a fallback score."""
        with patch(
            "tasks.ai_engine.orchestrator.ScoringOracle",
            return_value=make_oracle(FakeProvider()),
        ):
            result = refresh_burnout_score.apply(args=[self.user.pk]).get()

        record = BurnoutScore.objects.get(pk=result["id"])
        self.assertEqual(record.user_id, self.user.pk)
        self.assertEqual(record.model_used, "fallback")
