"""
Padaria Exceptions.

All padaria errors derive from PadariaError for consistent handling.
Each subclass carries the HTTP status the API layer answers with.
"""

from typing import Any


class PadariaError(Exception):
    """
    Base exception for all Padaria errors.

    Usage:
        raise ValidationFailed("EMPTY_INGREDIENTS", "A receita precisa de ingredientes.")
        raise Conflict("DUPLICATE_NAME", name="Farinha")

    Attributes:
        code: Stable error code (EMPTY_INGREDIENTS, DUPLICATE_NAME, etc.)
        message: Human-readable message shown to the caller
        details: Additional context as keyword arguments
    """

    status_code = 500
    default_message = "Erro interno."

    def __init__(self, code: str, message: str | None = None, **details: Any):
        self.code = code
        self.message = message or self.default_message
        self.details = details
        super().__init__(f"{code}: {self.message}")

    def as_dict(self) -> dict:
        """Return error as dictionary for API responses."""
        return {"code": self.code, "message": self.message, **self.details}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{type(self).__name__}({self.code}: {details_str})"
        return f"{type(self).__name__}({self.code})"


class ValidationFailed(PadariaError):
    """Missing or malformed input. Raised before any unit of work is opened."""

    status_code = 400
    default_message = "Dados inválidos."


class AuthenticationFailed(PadariaError):
    status_code = 401
    default_message = "Credenciais inválidas."


class Forbidden(PadariaError):
    status_code = 403
    default_message = "Perfil sem permissão para esta operação."


class NotFound(PadariaError):
    status_code = 404
    default_message = "Registro não encontrado."


class Conflict(PadariaError):
    """Uniqueness violation (name, e-mail, one kit per order)."""

    status_code = 409
    default_message = "Registro já existe."


class StorageError(PadariaError):
    """Transaction failure. Nothing from the failed unit of work is persisted."""

    status_code = 500
    default_message = "Erro ao gravar no banco de dados."


class StorageUnavailable(PadariaError):
    status_code = 503
    default_message = "Banco de dados indisponível."


# Common error codes
# VALIDATION_ERROR: Required field missing or empty
# EMPTY_INGREDIENTS: Recipe without ingredient lines
# INVALID_INGREDIENT_TYPE: Ingredient discriminator not materia_prima/sub_receita
# INVALID_STATUS: Status transition not allowed
# REFERENCE_NOT_FOUND: Ingredient line points to a missing raw material/recipe
# NOT_A_SUB_RECIPE: Referenced recipe is not flagged as sub-recipe
# CYCLE_DETECTED: Recipe would include itself (directly or transitively)
# COMPOSITION_TOO_DEEP: Sub-recipe nesting exceeds MAX_COMPOSITION_DEPTH
# DUPLICATE_NAME / DUPLICATE_EMAIL / KIT_EXISTS: Uniqueness violations
