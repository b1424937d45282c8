from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    """
    In-app message for one user. Clients poll for new rows; there is no push.
    """

    class Type(models.TextChoices):
        TASK_COMPLETED = 'task_completed', _('Task completed')
        TASK_ASSIGNED = 'task_assigned', _('Task assigned')
        TEAM_UPDATE = 'team_update', _('Team update')
        GENERAL = 'general', _('General')

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
        verbose_name=_("recipient")
    )
    type = models.CharField(
        max_length=30,
        choices=Type.choices,
        default=Type.GENERAL,
        verbose_name=_("type")
    )
    title = models.CharField(max_length=255, verbose_name=_("title"))
    message = models.TextField(verbose_name=_("message"))

    task = models.ForeignKey(
        'tasks.Task',
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='notifications'
    )
    project = models.ForeignKey(
        'teams.Project',
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='notifications'
    )

    is_read = models.BooleanField(default=False, db_index=True, verbose_name=_("is read"))
    created_at = models.DateTimeField(auto_now_add=True, db_index=True, verbose_name=_("created at"))

    class Meta:
        verbose_name = _("Notification")
        verbose_name_plural = _("Notifications")
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read', '-created_at'], name='notif_user_unread_idx'),
        ]

    def __str__(self):
        return f"{self.title} -> {self.user}"
