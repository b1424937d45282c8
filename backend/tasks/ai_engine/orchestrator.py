# tasks/ai_engine/orchestrator.py

import datetime
import logging
from typing import Any, Dict, Optional

from django.contrib.auth import get_user_model
from django.utils import timezone

from burnout.models import BurnoutScore
from .cache import BurnoutScoreCache
from .exceptions import OracleExhaustedError
from .features import BurnoutFeatures, build_feature_vector
from .oracle import ScoringOracle
from .rules import FallbackScorer

# Configure logging for pipeline auditing
logger = logging.getLogger(__name__)

User = get_user_model()

class BurnoutOrchestrator:
    """
    Per-user burnout pipeline: cache -> features -> oracle -> fallback -> persist.

    Every step is strictly sequential for one user. The oracle and cache
    can be injected; by default the process-wide provider is used.
    """

    def __init__(
        self,
        oracle: Optional[ScoringOracle] = None,
        cache: Optional[BurnoutScoreCache] = None,
        fallback: Optional[FallbackScorer] = None,
    ):
        self.oracle = oracle if oracle is not None else ScoringOracle()
        self.cache_manager = cache if cache is not None else BurnoutScoreCache()
        self.fallback_scorer = fallback if fallback is not None else FallbackScorer()

    @staticmethod
    def _week_bucket(now: datetime.datetime):
        iso = now.isocalendar()
        return iso[1], iso[0]

    @staticmethod
    def _display_name(user_id) -> str:
        user = User.objects.filter(pk=user_id).only('first_name', 'last_name', 'username').first()
        return user.display_name if user else 'Unknown'

    def score_features(self, features: BurnoutFeatures, user_name: str, user_id=None) -> Dict[str, Any]:
        """Oracle result, or the deterministic fallback when the oracle is exhausted."""
        try:
            return self.oracle.score_burnout(features, user_name, user_id)
        except OracleExhaustedError as e:
            logger.warning(f"Orchestrator: oracle exhausted for user {user_id}, using fallback: {e}")
            return self.fallback_scorer.score(features)

    def compute_burnout(self, user_id, project_id=None, now=None) -> Dict[str, Any]:
        """
        Compute a fresh result. Reads only; nothing is persisted.
        """
        features = build_feature_vector(user_id, project_id, now=now)
        return self.score_features(features, self._display_name(user_id), user_id)

    def get_or_compute_score(
        self,
        user_id,
        project_id=None,
        force_refresh: bool = False,
        now: Optional[datetime.datetime] = None,
    ) -> BurnoutScore:
        """
        Return the fresh cached score, or compute and persist a new one.

        `force_refresh` skips the cache lookup and always creates a new row.
        """
        now = now or timezone.now()

        # --- LAYER 1: FRESHNESS WINDOW ---
        if not force_refresh:
            cached = self.cache_manager.get_fresh(user_id, project_id, now=now)
            if cached is not None:
                logger.info(f"Orchestrator: using cached burnout score {cached.pk} for user {user_id}")
                return cached

        # --- LAYER 2 & 3: ORACLE WITH DETERMINISTIC FALLBACK ---
        logger.info(f"Orchestrator: generating new burnout score for user {user_id}")
        result = self.compute_burnout(user_id, project_id, now=now)

        # --- LAYER 4: APPEND-ONLY PERSISTENCE ---
        week, year = self._week_bucket(now)
        score = BurnoutScore.objects.create(
            user_id=user_id,
            project_id=project_id or None,
            score=result["score"],
            risk_level=result["riskLevel"],
            week=week,
            year=year,
            factors=result["factors"],
            analysis=result.get("analysis", ""),
            recommendations=result.get("recommendations", []),
            model_used=result["modelUsed"],
        )
        logger.info(
            f"Orchestrator: stored burnout score {score.pk} for user {user_id} "
            f"(score={score.score}, model={score.model_used})"
        )
        return score
