from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _


class Team(models.Model):
    """
    A group of users reporting to one manager.
    A user may belong to several teams.
    """
    name = models.CharField(max_length=255, verbose_name=_("name"))

    manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='managed_teams',
        verbose_name=_("manager")
    )

    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name='teams',
        verbose_name=_("members")
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("updated at"))

    class Meta:
        verbose_name = _("Team")
        verbose_name_plural = _("Teams")
        ordering = ['name', 'created_at']

    def __str__(self):
        return f"{self.name} (manager: {self.manager})"


class Project(models.Model):
    """
    A body of work tracked by a team, optionally linked to a GitHub repository.
    """

    class Status(models.TextChoices):
        ACTIVE = 'active', _('Active')
        ARCHIVED = 'archived', _('Archived')

    name = models.CharField(max_length=255, verbose_name=_("name"))
    description = models.TextField(blank=True, verbose_name=_("description"))
    github_link = models.URLField(blank=True, verbose_name=_("GitHub link"))

    team = models.ForeignKey(
        Team,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='projects',
        verbose_name=_("team")
    )
    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name='projects',
        verbose_name=_("members")
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        verbose_name=_("status")
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("updated at"))

    class Meta:
        verbose_name = _("Project")
        verbose_name_plural = _("Projects")
        ordering = ['-created_at']

    def __str__(self):
        return self.name
