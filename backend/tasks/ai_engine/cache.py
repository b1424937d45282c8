# tasks/ai_engine/cache.py

import datetime
import logging
from typing import Optional

from django.conf import settings
from django.utils import timezone

from burnout.models import BurnoutScore

logger = logging.getLogger(__name__)


class BurnoutScoreCache:
    """
    Freshness-window lookup over persisted BurnoutScore rows.

    There is no separate cache store: the newest stored score is reused
    while it is younger than the window. The key is (user, optional
    project, window) only, so a hit may be stale relative to GitHub/task
    changes made inside the window.

    The check is best-effort. Two concurrent misses for the same user both
    compute and both persist; rows are never mutated, so the worst case is
    a duplicate row.
    """

    def __init__(self, window_minutes: Optional[int] = None):
        """
        Args:
            window_minutes: Freshness window (default: BURNOUT_CACHE_WINDOW_MINUTES, 60).
        """
        if window_minutes is None:
            window_minutes = getattr(settings, 'BURNOUT_CACHE_WINDOW_MINUTES', 60)
        self.window = datetime.timedelta(minutes=window_minutes)

    def get_fresh(
        self,
        user_id,
        project_id=None,
        now: Optional[datetime.datetime] = None,
    ) -> Optional[BurnoutScore]:
        """
        Newest score for the user (and project, when given) inside the window.
        """
        now = now or timezone.now()

        qs = BurnoutScore.objects.filter(user_id=user_id, created_at__gte=now - self.window)
        if project_id:
            qs = qs.filter(project_id=project_id)

        cached = qs.order_by('-created_at', '-id').first()
        if cached is not None:
            logger.debug(f"Burnout cache hit: user={user_id} project={project_id} score_id={cached.pk}")
        else:
            logger.info(f"Burnout cache miss: user={user_id} project={project_id}")
        return cached
