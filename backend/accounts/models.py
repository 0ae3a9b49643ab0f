from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _

from magnaporta_backend.models import TimeStampedModel


ADMIN_ROLE = "admin"
CUSTOMER_ROLE = "customer"


class ApiPermission(TimeStampedModel):
    """A permission key checked by the role guard (e.g. "currency.manage")."""
    key = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return self.key


class Role(TimeStampedModel):
    name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    is_active = models.BooleanField(default=True)
    permissions = models.ManyToManyField(
        ApiPermission,
        through="RolePermission",
        related_name="roles",
        blank=True,
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class RolePermission(models.Model):
    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name="role_permissions")
    permission = models.ForeignKey(ApiPermission, on_delete=models.CASCADE, related_name="role_permissions")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["role", "permission"], name="uniq_role_permission"),
        ]

    def __str__(self):
        return f"{self.role.name}:{self.permission.key}"


class UserType(TimeStampedModel):
    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The given email must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        if "role" not in extra_fields:
            extra_fields["role"], _ = Role.objects.get_or_create(name=ADMIN_ROLE)

        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Platform user.

    is_active and is_deleted are independent: deactivation only clears
    is_active, soft delete sets is_deleted and clears is_active. Only the
    admin activation path clears is_deleted again.
    """
    username = None
    email = models.EmailField("email address", unique=True)
    phone_number = models.CharField(max_length=32, unique=True, null=True, blank=True)
    is_verified = models.BooleanField(default=False)
    is_deleted = models.BooleanField(default=False)
    sca_setup = models.BooleanField(default=False)

    role = models.ForeignKey(
        Role,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="users",
    )
    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="users",
    )
    user_type = models.ForeignKey(
        UserType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="users",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    def __str__(self):
        return self.email

    @property
    def role_name(self) -> str:
        return self.role.name if self.role_id else ""


class RegistrationAttempt(TimeStampedModel):
    """
    Recorded outcome of each registration step.

    The provider account is created before any local row, so a local
    failure after that point leaves an ORPHANED attempt carrying the
    external account id for reconciliation.
    """

    class State(models.TextChoices):
        STARTED = "STARTED", _("Started")
        ACCOUNT_CREATED = "ACCOUNT_CREATED", _("Provider account created")
        COMPLETED = "COMPLETED", _("Completed")
        FAILED = "FAILED", _("Failed")
        ORPHANED = "ORPHANED", _("Orphaned provider account")
        RECONCILED = "RECONCILED", _("Reconciled")

    email = models.EmailField()
    company_name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=32, blank=True, default="")
    state = models.CharField(max_length=20, choices=State.choices, default=State.STARTED)
    airwallex_account_id = models.CharField(max_length=255, blank=True, default="")
    company = models.ForeignKey(
        "companies.Company",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    failure_reason = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["state"], name="accounts_re_state_idx"),
        ]

    def __str__(self):
        return f"{self.email} [{self.state}]"
