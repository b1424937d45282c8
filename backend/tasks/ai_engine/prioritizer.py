# tasks/ai_engine/prioritizer.py

import datetime
import logging
from typing import Any, Dict, List, Optional, Sequence

from django.utils import timezone

from ..models import Task, TaskStatus
from .exceptions import OracleExhaustedError
from .features import TaskFeatures, build_task_features
from .oracle import ScoringOracle

logger = logging.getLogger(__name__)

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}

EMPTY_MESSAGE = "No incomplete tasks to sort"
DEFAULT_AI_REASONING = "AI-optimized task order"
FALLBACK_REASONING = (
    "Fallback sorting: overdue tasks first, then in-progress, then by priority and deadline"
)


def validate_permutation(indices: Any, size: int) -> List[int]:
    """
    Accept `indices` only if it is exactly a permutation of 0..size-1.

    Raises:
        ValueError: wrong type, wrong length, duplicates or out-of-range values.
    """
    if not isinstance(indices, list):
        raise ValueError("sortedIndices must be a list")
    if len(indices) != size:
        raise ValueError(f"sortedIndices has {len(indices)} entries, expected {size}")
    if any(isinstance(i, bool) or not isinstance(i, int) for i in indices):
        raise ValueError("sortedIndices must contain integers only")
    if sorted(indices) != list(range(size)):
        raise ValueError("sortedIndices is not a permutation of the task indices")
    return list(indices)


def fallback_order(records: Sequence[TaskFeatures]) -> List[int]:
    """
    Deterministic ordering: overdue first, then in-progress, then priority
    (high, medium, low), then fewest hours until due. Ties keep the base
    (creation) order.
    """
    def sort_key(record: TaskFeatures):
        return (
            0 if record.is_overdue else 1,
            0 if record.status == TaskStatus.IN_PROGRESS else 1,
            PRIORITY_RANK.get(record.priority, len(PRIORITY_RANK)),
            record.hours_until_due,
        )

    return [r.index for r in sorted(records, key=sort_key)]


class TaskPrioritizer:
    """
    Recommends an order for a user's open tasks.

    The oracle is asked once for a permutation; anything other than a
    complete, valid permutation switches to `fallback_order`.
    """

    def __init__(self, oracle: Optional[ScoringOracle] = None):
        self.oracle = oracle if oracle is not None else ScoringOracle()

    @staticmethod
    def open_tasks(user_id) -> List[Task]:
        return list(
            Task.objects.filter(assigned_to_id=user_id, status__in=TaskStatus.open_values())
            .select_related("project")
            .order_by("created_at", "id")
        )

    def prioritize(self, user_id, now: Optional[datetime.datetime] = None) -> Dict[str, Any]:
        """
        Returns:
            {sortedTaskIds, reasoning, tasksAnalyzed}
        """
        tasks = self.open_tasks(user_id)
        if not tasks:
            return {"sortedTaskIds": [], "reasoning": EMPTY_MESSAGE, "message": EMPTY_MESSAGE, "tasksAnalyzed": 0}

        records = build_task_features(tasks, now=now or timezone.now())

        try:
            raw_indices, reasoning, model_id = self.oracle.rank_tasks(records)
            indices = validate_permutation(raw_indices, len(records))
            reasoning = reasoning or DEFAULT_AI_REASONING
            logger.info(f"Prioritizer: {model_id} ordered {len(records)} tasks for user {user_id}")
        except (OracleExhaustedError, ValueError) as e:
            logger.warning(f"Prioritizer: using fallback order for user {user_id}: {e}")
            indices = fallback_order(records)
            reasoning = FALLBACK_REASONING

        return {
            "sortedTaskIds": [str(tasks[i].pk) for i in indices],
            "reasoning": reasoning,
            "tasksAnalyzed": len(tasks),
        }
