from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _
from teams.models import Project


class TaskStatus(models.TextChoices):
    """
    Canonical task lifecycle states.

    Clients may send the legacy spelling "todo"; it is mapped here once,
    via `normalize`, and nowhere else.
    """
    TODO = 'to-do', _('To do')
    IN_PROGRESS = 'in-progress', _('In progress')
    DONE = 'done', _('Done')

    @classmethod
    def normalize(cls, value):
        if value is None:
            return None
        value = str(value).strip().lower()
        if value == 'todo':
            return cls.TODO.value
        if value not in cls.values:
            raise ValueError(f"Unknown task status: {value!r}")
        return value

    @classmethod
    def open_values(cls):
        return [cls.TODO.value, cls.IN_PROGRESS.value]


class TaskPriority(models.TextChoices):
    LOW = 'low', _('Low')
    MEDIUM = 'medium', _('Medium')
    HIGH = 'high', _('High')


class Task(models.Model):
    """
    A unit of work inside a project, optionally assigned to one user.
    """
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='tasks',
        verbose_name=_("project")
    )

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='assigned_tasks',
        verbose_name=_("assignee")
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='created_tasks',
        verbose_name=_("created by")
    )

    title = models.CharField(max_length=255, verbose_name=_("title"))
    description = models.TextField(blank=True, verbose_name=_("description"))

    status = models.CharField(
        max_length=20,
        choices=TaskStatus.choices,
        default=TaskStatus.TODO,
        db_index=True,
        verbose_name=_("status")
    )
    priority = models.CharField(
        max_length=10,
        choices=TaskPriority.choices,
        default=TaskPriority.MEDIUM,
        verbose_name=_("priority")
    )

    estimate_hours = models.FloatField(
        null=True, blank=True,
        verbose_name=_("estimated hours")
    )
    real_hours = models.FloatField(
        null=True, blank=True,
        verbose_name=_("actual hours"),
        help_text=_("Filled in from started_at/completed_at when the task is done.")
    )

    due_date = models.DateTimeField(
        null=True, blank=True,
        verbose_name=_("due date"),
        help_text=_("The deadline for the task.")
    )

    # Lifecycle timestamps, set by the status transition endpoint
    started_at = models.DateTimeField(null=True, blank=True, verbose_name=_("started at"))
    completed_at = models.DateTimeField(null=True, blank=True, verbose_name=_("completed at"))

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("updated at"))
    
    class Meta:
        verbose_name = _("Task")
        verbose_name_plural = _("Tasks")
        ordering = ['created_at']

    def __str__(self):
        return f"Task {self.title} ({self.status})"

    @property
    def is_open(self):
        return self.status in TaskStatus.open_values()

    @property
    def effective_due_date(self):
        """Tasks without a deadline are treated as due when they were created."""
        return self.due_date or self.created_at
