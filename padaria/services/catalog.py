"""
Recipe Composition Store.

Owns the catalog of raw materials and recipes and performs the atomic
creation of a recipe together with its ingredient lines.

Usage:
    from padaria.services import catalog
    from padaria.composition import RecipeDraft, parse_ingredient

    draft = RecipeDraft(
        name="Pão Francês",
        yield_quantity=Decimal("10"),
        yield_unit="kg",
        lines=[
            parse_ingredient({"tipo": "materia_prima", "id": 1, "quantidade": 2.5}),
            parse_ingredient({"tipo": "sub_receita", "id": 7, "quantidade": 1}),
        ],
    )
    result = catalog.create_recipe(draft, role=user.role, user=user)

Per request:
    Received → Validating → Rejected
                          → TransactionOpen → LineInsertFailed → RolledBack
                                            → AllLinesInserted → Committed
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import (
    DEFAULT_DB_ALIAS,
    DatabaseError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    transaction,
)

from padaria.composition import (
    RawMaterialTarget,
    RecipeDraft,
    SubRecipeTarget,
    find_cycle,
)
from padaria.conf import get_setting
from padaria.exceptions import (
    Conflict,
    Forbidden,
    NotFound,
    PadariaError,
    StorageError,
    StorageUnavailable,
    ValidationFailed,
)
from padaria.models import IngredientLine, RawMaterial, Recipe, Role
from padaria.results import RecipeCreated

logger = logging.getLogger(__name__)


def require_admin(role, operation: str) -> None:
    """Trust the verified role handed over by the access layer."""
    if role != Role.ADMIN:
        logger.warning(
            f"{operation} refused for role {role}",
            extra={"operation": operation, "role": str(role)},
        )
        raise Forbidden("FORBIDDEN", role=str(role))


class CompositionStore:
    """
    Catalog of raw materials and recipes.

    Args:
        using: Database alias every read and unit of work runs against.
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    # ══════════════════════════════════════════════════════════════
    # RAW MATERIALS
    # ══════════════════════════════════════════════════════════════

    def list_raw_materials(self) -> list[RawMaterial]:
        """All raw materials, by name."""
        try:
            return list(RawMaterial.objects.using(self.using).order_by("name"))
        except (OperationalError, InterfaceError) as exc:
            logger.exception("Could not list raw materials")
            raise StorageUnavailable("STORAGE_UNAVAILABLE") from exc

    def create_raw_material(self, name: str, unit: str, *, role) -> RawMaterial:
        """
        Create a raw material.

        Raises:
            Forbidden: role is not ADMIN
            ValidationFailed: empty or overlong name or unit
            Conflict: name already exists
        """
        require_admin(role, "create_raw_material")

        name = str(name or "").strip()
        unit = str(unit or "").strip()
        if not name:
            raise ValidationFailed(
                "VALIDATION_ERROR", "Campo nome é obrigatório.", field="nome"
            )
        if not unit:
            raise ValidationFailed(
                "VALIDATION_ERROR",
                "Campo unidade_medida é obrigatório.",
                field="unidade_medida",
            )
        for field_name, value, wire_name in (
            ("name", name, "nome"),
            ("unit", unit, "unidade_medida"),
        ):
            max_length = RawMaterial._meta.get_field(field_name).max_length
            if len(value) > max_length:
                raise ValidationFailed(
                    "VALIDATION_ERROR",
                    f"Campo {wire_name} excede {max_length} caracteres.",
                    field=wire_name,
                )

        try:
            with transaction.atomic(using=self.using):
                material = RawMaterial.objects.using(self.using).create(
                    name=name, unit=unit
                )
        except IntegrityError as exc:
            logger.warning(
                f"Raw material {name!r} already exists", extra={"name": name}
            )
            raise Conflict(
                "DUPLICATE_NAME", f"Matéria-prima '{name}' já existe.", name=name
            ) from exc
        except (OperationalError, InterfaceError) as exc:
            logger.exception("Database unreachable while creating raw material")
            raise StorageUnavailable("STORAGE_UNAVAILABLE") from exc
        except DatabaseError as exc:
            logger.exception(f"Failed to create raw material {name!r}")
            raise StorageError("STORAGE_ERROR") from exc

        logger.info(
            f"Raw material created: {material.name} ({material.unit})",
            extra={"raw_material": material.pk, "name": material.name},
        )
        return material

    # ══════════════════════════════════════════════════════════════
    # RECIPES
    # ══════════════════════════════════════════════════════════════

    def list_recipes(self) -> list[Recipe]:
        """All recipes, by name. Headers only: ingredient lines are not loaded."""
        try:
            return list(Recipe.objects.using(self.using).order_by("name"))
        except (OperationalError, InterfaceError) as exc:
            logger.exception("Could not list recipes")
            raise StorageUnavailable("STORAGE_UNAVAILABLE") from exc

    def get_recipe(self, recipe_id: int) -> Recipe:
        """One recipe with its ingredient lines prefetched in input order."""
        try:
            return (
                Recipe.objects.using(self.using)
                .prefetch_related("ingredients__raw_material", "ingredients__sub_recipe")
                .get(pk=recipe_id)
            )
        except Recipe.DoesNotExist:
            raise NotFound("RECIPE_NOT_FOUND", recipe_id=recipe_id)
        except (OperationalError, InterfaceError) as exc:
            logger.exception(f"Could not load recipe {recipe_id}")
            raise StorageUnavailable("STORAGE_UNAVAILABLE") from exc

    def create_recipe(self, draft: RecipeDraft, *, role, user=None) -> RecipeCreated:
        """
        Create a recipe and all its ingredient lines as one unit of work.

        Validation happens before the transaction is opened. Inside it the
        recipe row is inserted, then one IngredientLine per draft line in
        input order, then the composition graph is checked for cycles.
        Any failure rolls back every row written so far.

        Raises:
            Forbidden: role is not ADMIN (nothing written)
            ValidationFailed: incomplete draft (nothing written)
            Conflict: recipe name already exists (rolled back)
            StorageError: missing reference, cycle, or database failure (rolled back)
        """
        require_admin(role, "create_recipe")

        try:
            draft.validate()
        except ValidationFailed as exc:
            logger.warning(f"Recipe rejected: {exc}", extra=exc.details)
            raise

        name = draft.name.strip()
        stage = "recipe"

        try:
            with transaction.atomic(using=self.using):
                recipe = Recipe(
                    name=name,
                    yield_quantity=draft.yield_quantity,
                    yield_unit=draft.yield_unit.strip(),
                    is_sub_recipe=bool(draft.is_sub_recipe),
                )
                recipe.save(using=self.using)

                stage = "lines"
                for position, line_draft in enumerate(draft.lines):
                    self._check_target(recipe, position, line_draft.target)
                    line = IngredientLine.from_draft(recipe, position, line_draft)
                    line.save(using=self.using)

                cycle = find_cycle(recipe.pk, self._sub_recipe_edges)
                if cycle:
                    raise StorageError(
                        "CYCLE_DETECTED",
                        "A receita não pode conter a si mesma.",
                        cycle=cycle,
                    )

                lines_created = len(draft.lines)
                transaction.on_commit(
                    lambda: self._send_created(recipe, lines_created, user),
                    using=self.using,
                )
        except PadariaError as exc:
            logger.warning(
                f"Recipe {name!r} rolled back: {exc}",
                extra={"recipe": name, "code": exc.code},
            )
            raise
        except IntegrityError as exc:
            if stage == "recipe":
                logger.warning(
                    f"Recipe {name!r} already exists", extra={"recipe": name}
                )
                raise Conflict(
                    "DUPLICATE_NAME", f"Receita '{name}' já existe.", name=name
                ) from exc
            logger.exception(f"Recipe {name!r} rolled back on constraint violation")
            raise StorageError("STORAGE_ERROR") from exc
        except DjangoValidationError as exc:
            logger.warning(
                f"Recipe {name!r} rolled back: {exc.messages}", extra={"recipe": name}
            )
            raise ValidationFailed("VALIDATION_ERROR", "; ".join(exc.messages)) from exc
        except DatabaseError as exc:
            logger.exception(f"Recipe {name!r} rolled back on database error")
            raise StorageError("STORAGE_ERROR") from exc

        logger.info(
            f"Recipe created: {name} with {lines_created} ingredient lines",
            extra={"recipe": recipe.pk, "name": name, "lines": lines_created},
        )
        return RecipeCreated(recipe_id=recipe.pk, lines_created=lines_created)

    # ── internals ──

    def _check_target(self, recipe: Recipe, position: int, target) -> None:
        """Lock and verify the row an ingredient line is about to reference."""
        if isinstance(target, RawMaterialTarget):
            found = (
                RawMaterial.objects.using(self.using)
                .select_for_update()
                .filter(pk=target.id)
                .first()
            )
            if found is None:
                raise StorageError(
                    "REFERENCE_NOT_FOUND",
                    f"Matéria-prima {target.id} não existe.",
                    tipo=target.kind,
                    id=target.id,
                    index=position,
                )
            return

        if isinstance(target, SubRecipeTarget):
            if target.id == recipe.pk:
                raise StorageError(
                    "CYCLE_DETECTED",
                    "A receita não pode conter a si mesma.",
                    cycle=[recipe.pk, recipe.pk],
                )
            found = (
                Recipe.objects.using(self.using)
                .select_for_update()
                .filter(pk=target.id)
                .first()
            )
            if found is None:
                raise StorageError(
                    "REFERENCE_NOT_FOUND",
                    f"Sub-receita {target.id} não existe.",
                    tipo=target.kind,
                    id=target.id,
                    index=position,
                )
            if get_setting("REQUIRE_SUB_RECIPE_FLAG") and not found.is_sub_recipe:
                raise StorageError(
                    "NOT_A_SUB_RECIPE",
                    f"Receita '{found.name}' não está marcada como sub-receita.",
                    id=target.id,
                    index=position,
                )
            return

        raise TypeError(f"Unknown ingredient target: {target!r}")

    def _sub_recipe_edges(self, recipe_id: int) -> list[int]:
        return list(
            IngredientLine.objects.using(self.using)
            .filter(recipe_id=recipe_id, sub_recipe__isnull=False)
            .values_list("sub_recipe_id", flat=True)
        )

    def _send_created(self, recipe: Recipe, lines_created: int, user) -> None:
        from padaria.signals import recipe_created

        recipe_created.send(
            sender=Recipe,
            recipe=recipe,
            lines_created=lines_created,
            user=user,
        )


catalog = CompositionStore()
