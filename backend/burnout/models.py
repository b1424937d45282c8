from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils.translation import gettext_lazy as _
from teams.models import Project


class RiskLevel(models.TextChoices):
    LOW = 'low', _('Low')
    MEDIUM = 'medium', _('Medium')
    HIGH = 'high', _('High')


class GithubActivity(models.Model):
    """
    Snapshot of a user's GitHub activity on one project, written by the
    GitHub sync job. Each entry in the JSON lists mirrors the GitHub API:
    commits carry message/date/sha, pull requests and issues carry
    title/url/state/opened_at/closed_at.
    """
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='github_activity',
        verbose_name=_("project")
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='github_activity',
        verbose_name=_("user")
    )

    commits = models.JSONField(default=list, blank=True)
    pull_requests = models.JSONField(default=list, blank=True)
    issues = models.JSONField(default=list, blank=True)
    reviews = models.JSONField(default=list, blank=True)

    last_synced = models.DateTimeField(null=True, blank=True, verbose_name=_("last synced"))

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("updated at"))

    class Meta:
        verbose_name = _("GitHub activity")
        verbose_name_plural = _("GitHub activity")

    def __str__(self):
        return f"GitHub activity of {self.user} on {self.project}"


class BurnoutScore(models.Model):
    """
    One burnout risk computation for a user, optionally scoped to a project.

    Rows are append-only: refreshing a score creates a new row. `factors`
    holds the exact feature snapshot the score was computed from and
    `model_used` names the model that produced it (or "fallback").
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='burnout_scores',
        verbose_name=_("user")
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='burnout_scores',
        verbose_name=_("project")
    )

    score = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        verbose_name=_("score")
    )
    risk_level = models.CharField(
        max_length=10,
        choices=RiskLevel.choices,
        verbose_name=_("risk level")
    )

    # Informational bucket, never used for cache lookups
    week = models.PositiveSmallIntegerField(null=True, blank=True)
    year = models.PositiveSmallIntegerField(null=True, blank=True)

    factors = models.JSONField(default=dict, blank=True)
    analysis = models.TextField(blank=True)
    recommendations = models.JSONField(default=list, blank=True)
    model_used = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True, verbose_name=_("created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("updated at"))

    class Meta:
        verbose_name = _("Burnout score")
        verbose_name_plural = _("Burnout scores")
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='burnout_user_created_idx'),
        ]

    def __str__(self):
        return f"{self.user} burnout {self.score} ({self.risk_level})"
