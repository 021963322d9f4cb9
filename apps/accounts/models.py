"""
Custom User model for the project management backend.

CRITICAL: AUTH_USER_MODEL points here and must be set before running
any migrations. Changing the User model after migrations is very complex.
"""

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    """
    Custom user manager where email is the unique identifier
    for authentication instead of username.
    """

    def create_user(self, email, password=None, **extra_fields):
        """Create and save a regular user with the given email and password."""
        if not email:
            raise ValueError('The Email field must be set')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Create and save a SuperUser with the given email and password."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', User.Role.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom User model with email authentication and role-based access.

    Roles:
    - Admin: Full access, user management, audit log
    - PM: Project manager, publishes daily updates, manages all tracks
    - Track Lead: Leads a single track
    - Member: Works on assigned tasks
    """

    class Role(models.TextChoices):
        ADMIN = 'admin', 'Admin'
        PM = 'pm', 'Project Manager'
        TRACK_LEAD = 'track_lead', 'Track Lead'
        MEMBER = 'member', 'Member'

    # Remove username field, use email instead
    username = None
    email = models.EmailField(
        'email address',
        unique=True,
        error_messages={
            'unique': 'A user with that email already exists.',
        },
    )
    name_ar = models.CharField(
        max_length=150,
        blank=True,
        help_text='Display name in Arabic',
    )

    # Role and track
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.MEMBER,
        db_index=True,
    )
    track = models.ForeignKey(
        'tracks.Track',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='members',
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    class Meta:
        verbose_name = 'user'
        verbose_name_plural = 'users'
        ordering = ['first_name', 'last_name']

    def __str__(self):
        return f"{self.get_full_name()} ({self.email})"

    def get_full_name(self):
        """Return the first_name plus the last_name, with a space in between."""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.email

    def get_short_name(self):
        return self.first_name or self.email.split('@')[0]

    @property
    def display_name_ar(self):
        return self.name_ar or self.get_full_name()

    # ==========================================================================
    # Role Permission Methods
    # ==========================================================================

    def is_admin(self):
        """Check if user is an Admin."""
        return self.role == self.Role.ADMIN

    def is_pm(self):
        """Check if user is a Project Manager."""
        return self.role == self.Role.PM

    def can_manage_updates(self):
        """Admins and PMs publish, edit, pin and delete daily updates."""
        return self.role in [self.Role.ADMIN, self.Role.PM]

    def can_view_audit_log(self):
        return self.role == self.Role.ADMIN
