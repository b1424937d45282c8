# tasks/ai_engine/__init__.py
"""
AI Engine Package
=================

Burnout scoring and task prioritization for TeamPulse.

Modules:
--------
- features: Burnout feature vector and prioritizer task records
- oracle: OpenAI provider plus multi-model fallover with quota backoff
- rules: Deterministic fallback scorer and risk-level thresholds
- cache: Freshness-window lookup over stored burnout scores
- orchestrator: Per-user pipeline (cache -> oracle -> fallback -> persist)
- team: Team aggregation and the daily-hours heatmap
- prioritizer: AI task ordering with a deterministic fallback sort
- celery_tasks: Background burnout refresh via Celery

Architecture:
-------------
All burnout scoring flows through the BurnoutOrchestrator, which returns a
persisted BurnoutScore:

    {
        "score": int,              # 0..100
        "riskLevel": str,          # low | medium | high
        "factors": {...},
        "analysis": str,
        "recommendations": [...],
        "modelUsed": str           # candidate model id or "fallback"
    }

Usage:
------
    from tasks.ai_engine import BurnoutOrchestrator

    orchestrator = BurnoutOrchestrator()
    record = orchestrator.get_or_compute_score(user_id=7, project_id=None)
"""

from .cache import BurnoutScoreCache
from .celery_tasks import refresh_burnout_score
from .exceptions import (
    OracleExhaustedError,
    ProviderError,
    ProviderErrorKind,
    TeamNotFoundError,
)
from .oracle import OpenAIProvider, ScoringOracle, get_provider
from .orchestrator import BurnoutOrchestrator
from .prioritizer import TaskPrioritizer
from .rules import FallbackScorer
from .team import get_team_burnout, get_team_daily_hours

__all__ = [
    # Core classes
    "BurnoutOrchestrator",
    "BurnoutScoreCache",
    "FallbackScorer",
    "OpenAIProvider",
    "ScoringOracle",
    "TaskPrioritizer",
    # Exceptions
    "OracleExhaustedError",
    "ProviderError",
    "ProviderErrorKind",
    "TeamNotFoundError",
    # Functions
    "get_provider",
    "get_team_burnout",
    "get_team_daily_hours",
    "refresh_burnout_score",
]
