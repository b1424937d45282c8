from django.contrib.auth.base_user import BaseUserManager


class CustomUserManager(BaseUserManager):
    """
    Manager for email-authenticated accounts.
    `username` stays unique but is optional when creating a user; it
    defaults to the normalized email.
    """
    use_in_migrations = True

    def _create(self, email, password, **extra_fields):
        if not email:
            raise ValueError('An email address is required.')

        email = self.normalize_email(email)
        extra_fields.setdefault('username', email)

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        """Superusers always carry the superadmin role and admin-site access."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', 'superadmin')

        for flag in ('is_staff', 'is_superuser'):
            if extra_fields.get(flag) is not True:
                raise ValueError(f'Superuser must have {flag}=True.')

        return self._create(email, password, **extra_fields)

    def managers(self):
        return self.filter(role__in=('manager', 'superadmin'), is_active=True)
