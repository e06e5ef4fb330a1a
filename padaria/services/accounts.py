"""
Identity & Access.

Registration, credential check and JWT issuance. The token carries the
user id (``userId``) and the role (``perfil``); every other layer only
consumes the verified role.
"""

import logging

from django.contrib.auth import authenticate, get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from rest_framework_simplejwt.tokens import AccessToken

from padaria.conf import get_setting
from padaria.exceptions import (
    AuthenticationFailed,
    Conflict,
    Forbidden,
    ValidationFailed,
)
from padaria.models import Role

logger = logging.getLogger(__name__)


def register_user(name, email, password, role, *, creator=None):
    """
    Create a user.

    Args:
        name, email, password, role: all required; role must be a Role value.
        creator: authenticated caller, if any. Only an ADMIN may create
            another ADMIN unless ALLOW_ADMIN_SELF_REGISTRATION is on.

    Raises:
        ValidationFailed: missing field, bad e-mail or unknown role
        Forbidden: ADMIN registration without an ADMIN creator
        Conflict: e-mail already registered
    """
    if not all([name, email, password, role]):
        raise ValidationFailed("VALIDATION_ERROR", "Todos os campos são obrigatórios.")

    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationFailed("VALIDATION_ERROR", "E-mail inválido.", field="email")

    if role not in Role.values:
        raise ValidationFailed(
            "VALIDATION_ERROR", f"Perfil inválido: {role!r}.", field="perfil"
        )

    if role == Role.ADMIN and not get_setting("ALLOW_ADMIN_SELF_REGISTRATION"):
        if getattr(creator, "role", None) != Role.ADMIN:
            logger.warning(
                f"ADMIN registration refused for {email}",
                extra={"email": email, "creator": getattr(creator, "email", None)},
            )
            raise Forbidden(
                "FORBIDDEN", "Somente um ADMIN pode cadastrar outro ADMIN."
            )

    User = get_user_model()
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email, password=password, name=name, role=role
            )
    except IntegrityError as exc:
        logger.warning(f"E-mail already registered: {email}", extra={"email": email})
        raise Conflict(
            "DUPLICATE_EMAIL", "E-mail já cadastrado.", email=email
        ) from exc

    logger.info(
        f"User registered: {user.email} ({user.role})",
        extra={"user": user.pk, "role": user.role},
    )
    return user


def issue_token(user) -> str:
    """Signed access token with ``userId`` and ``perfil`` claims."""
    token = AccessToken.for_user(user)
    token["perfil"] = user.role
    return str(token)


def login(email, password) -> tuple:
    """
    Check credentials and issue a token.

    Returns:
        (token, user)

    Raises:
        ValidationFailed: e-mail or password missing
        AuthenticationFailed: unknown e-mail, wrong password or inactive user
    """
    if not email or not password:
        raise ValidationFailed("VALIDATION_ERROR", "Email e senha são obrigatórios.")

    user = authenticate(request=None, email=email, password=password)
    if user is None:
        logger.info(f"Failed login for {email}", extra={"email": email})
        raise AuthenticationFailed("INVALID_CREDENTIALS")

    logger.info(f"Login: {user.email}", extra={"user": user.pk})
    return issue_token(user), user
