from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.utils.translation import gettext_lazy as _
from .managers import CustomUserManager


class CustomUser(AbstractBaseUser, PermissionsMixin):
    """
    Team member account.

    Logs in with email. `role` decides what the dashboard shows: managers
    get the team burnout view, developers and testers their own tasks.
    `github_username` links synced GitHub activity to the account.
    """

    class Role(models.TextChoices):
        SUPERADMIN = 'superadmin', _('Super admin')
        MANAGER = 'manager', _('Manager')
        DEVELOPER = 'developer', _('Developer')
        TESTER = 'tester', _('Tester')

    email = models.EmailField(_('email address'), unique=True)
    username = models.CharField(_('username'), max_length=150, unique=True, null=True)
    first_name = models.CharField(_('first name'), max_length=150, blank=True)
    last_name = models.CharField(_('last name'), max_length=150, blank=True)

    role = models.CharField(
        _('role'),
        max_length=20,
        choices=Role.choices,
        default=Role.DEVELOPER,
    )
    github_username = models.CharField(_('GitHub username'), max_length=100, blank=True)
    timezone = models.CharField(
        _('timezone'),
        max_length=60,
        default='UTC',
        help_text=_('Used when rendering dashboards and reports.'),
    )

    # Admin site access; superusers get it by default
    is_staff = models.BooleanField(_('staff status'), default=False)
    # Deactivate instead of deleting so scores and tasks keep their owner
    is_active = models.BooleanField(_('active'), default=True)
    date_joined = models.DateTimeField(_('date joined'), auto_now_add=True)

    objects = CustomUserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['email']

    def get_full_name(self):
        return f'{self.first_name} {self.last_name}'.strip()

    def get_short_name(self):
        return self.first_name or self.username or self.email

    @property
    def display_name(self):
        """Name shown in prompts, notifications and team summaries."""
        return self.get_full_name() or self.username or 'Unknown'

    @property
    def is_manager(self):
        return self.role in (self.Role.MANAGER, self.Role.SUPERADMIN)

    def __str__(self):
        return f'{self.display_name} <{self.email}>'
