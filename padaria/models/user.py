"""
User model.

Login is by e-mail. Each user carries one role (perfil) that is copied into
the JWT and checked by the API permission classes.
"""

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    """Perfis de acesso."""

    ADMIN = "ADMIN", _("Administrador")
    PRODUCAO = "PRODUCAO", _("Produção")
    PRE_PESAGEM = "PRE_PESAGEM", _("Pré-pesagem")
    CONSULTA = "CONSULTA", _("Consulta")


class UserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("O e-mail é obrigatório.")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", Role.ADMIN)
        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Usuário do sistema da padaria."""

    username = None
    first_name = None
    last_name = None

    name = models.CharField(
        max_length=150,
        verbose_name=_("Nome"),
    )
    email = models.EmailField(
        unique=True,
        verbose_name=_("E-mail"),
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.CONSULTA,
        verbose_name=_("Perfil"),
    )

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        db_table = "padaria_usuario"
        verbose_name = _("Usuário")
        verbose_name_plural = _("Usuários")
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"

    def get_full_name(self) -> str:
        return self.name

    def get_short_name(self) -> str:
        return self.name

    @property
    def is_admin_role(self) -> bool:
        return self.role == Role.ADMIN
