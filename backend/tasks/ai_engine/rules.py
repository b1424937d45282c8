# tasks/ai_engine/rules.py

import logging
from typing import Any, Dict, List, Sequence, Tuple

from .features import BurnoutFeatures

# Configure logging for rule-engine auditing
logger = logging.getLogger(__name__)

FALLBACK_MODEL = "fallback"

HIGH_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 40


def clamp_score(value) -> int:
    return max(0, min(100, int(value)))


def risk_level_for(score: int) -> str:
    """<40 low, 40-69 medium, >=70 high."""
    if score >= HIGH_RISK_THRESHOLD:
        return "high"
    if score >= MEDIUM_RISK_THRESHOLD:
        return "medium"
    return "low"


class FallbackScorer:
    """
    Deterministic burnout scorer used whenever the oracle is exhausted.

    Each signal is scored against its own step table (first matching
    threshold wins), the points are summed and the total clamped to 0..100.
    No network access, so it is safe to call from anywhere.
    """

    # (strictly greater than, points), checked top-down
    COMMIT_STEPS: Sequence[Tuple[int, int]] = ((50, 30), (30, 20), (15, 10))
    IN_PROGRESS_STEPS: Sequence[Tuple[int, int]] = ((8, 35), (5, 25), (3, 15))
    OVERDUE_STEPS: Sequence[Tuple[int, int]] = ((5, 25), (2, 15))
    COMPLETED_STEPS: Sequence[Tuple[int, int]] = ((20, 10),)

    ANALYSIS = "Fallback calculation used due to AI error"
    RECOMMENDATIONS: List[str] = [
        "Take regular breaks",
        "Prioritize tasks",
        "Communicate with team",
    ]

    @staticmethod
    def _step_points(value: int, steps: Sequence[Tuple[int, int]]) -> int:
        for threshold, points in steps:
            if value > threshold:
                return points
        return 0

    def compute_score(self, features: BurnoutFeatures) -> int:
        total = (
            self._step_points(features.commits_count, self.COMMIT_STEPS)
            + self._step_points(features.tasks_in_progress, self.IN_PROGRESS_STEPS)
            + self._step_points(features.overdue_tasks, self.OVERDUE_STEPS)
            + self._step_points(features.completed_tasks, self.COMPLETED_STEPS)
        )
        return clamp_score(total)

    def score(self, features: BurnoutFeatures) -> Dict[str, Any]:
        """
        Produce the same result shape as the oracle.

        pullRequestsCount is reported as 0: the heuristic does not use it.
        """
        score = self.compute_score(features)
        factors = features.to_factors()
        factors["pullRequestsCount"] = 0

        logger.info(f"Fallback scorer: score={score}")
        return {
            "score": score,
            "riskLevel": risk_level_for(score),
            "factors": factors,
            "analysis": self.ANALYSIS,
            "recommendations": list(self.RECOMMENDATIONS),
            "modelUsed": FALLBACK_MODEL,
        }
