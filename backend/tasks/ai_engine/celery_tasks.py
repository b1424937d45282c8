# tasks/ai_engine/celery_tasks.py

import logging
from typing import Any, Dict, Optional

from celery import shared_task

from .orchestrator import BurnoutOrchestrator

# Configure logging for background worker monitoring
logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=600,  # Max backoff of 10 minutes
    max_retries=3,
    time_limit=300,
    soft_time_limit=280,
)
def refresh_burnout_score(
    self,
    user_id: int,
    project_id: Optional[int] = None,
) -> Optional[Dict[str, Any]]:
    """
    Worker: recompute and persist a fresh burnout score for one user.

    Enqueued after a task completes so the next dashboard read hits the
    cache. Input = (user_id, project_id) only; everything else is read from
    the database by the orchestrator.
    """
    logger.info(f"Burnout refresh started for user {user_id} (project {project_id})")
    try:
        record = BurnoutOrchestrator().get_or_compute_score(
            user_id,
            project_id=project_id,
            force_refresh=True,
        )
        logger.info(f"Burnout refresh persisted score {record.score} for user {user_id} via {record.model_used}")
        return {
            "id": record.pk,
            "score": record.score,
            "riskLevel": record.risk_level,
            "modelUsed": record.model_used,
        }
    except Exception as exc:
        logger.exception(f"Burnout refresh failed for user {user_id}: {exc}")
        # Re-raise for Celery retry policy
        raise
