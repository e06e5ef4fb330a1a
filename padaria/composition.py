"""
Recipe composition primitives.

An ingredient line points at exactly one target: a raw material (terminal)
or another recipe (sub-recipe). Targets are modelled as a tagged variant so
that "both set" or "neither set" cannot be expressed; they are only mapped to
the two nullable columns of IngredientLine at the storage boundary.

Recipes and their sub-recipe references form a directed graph that must stay
acyclic. ``find_cycle`` walks that graph by identity only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, Union

from django.core.exceptions import ValidationError
from django.core.validators import DecimalValidator

from padaria.exceptions import ValidationFailed

# Wire discriminators (API payload "tipo")
RAW_MATERIAL = "materia_prima"
SUB_RECIPE = "sub_receita"

# Storage precision of quantities (DecimalField max_digits=10, decimal_places=3)
QUANTITY_DIGITS = 10
QUANTITY_PLACES = 3


@dataclass(frozen=True)
class RawMaterialTarget:
    id: int

    kind = RAW_MATERIAL


@dataclass(frozen=True)
class SubRecipeTarget:
    id: int

    kind = SUB_RECIPE


IngredientTarget = Union[RawMaterialTarget, SubRecipeTarget]


def make_target(kind: str, target_id: int) -> IngredientTarget:
    """Build the tagged target for a wire discriminator."""
    if kind == RAW_MATERIAL:
        return RawMaterialTarget(int(target_id))
    if kind == SUB_RECIPE:
        return SubRecipeTarget(int(target_id))
    raise ValidationFailed(
        "INVALID_INGREDIENT_TYPE",
        f"Tipo de ingrediente inválido: {kind!r}.",
        tipo=kind,
    )


def to_decimal(value, field_name: str) -> Decimal:
    """Convert int/float/str input to Decimal, rejecting garbage."""
    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        raise ValidationFailed(
            "VALIDATION_ERROR", f"Campo {field_name} é obrigatório.", field=field_name
        )
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationFailed(
            "VALIDATION_ERROR", f"Campo {field_name} deve ser numérico.", field=field_name
        )


def check_precision(value: Decimal, field_name: str, **details) -> None:
    """Reject values the quantity columns cannot store exactly."""
    try:
        DecimalValidator(QUANTITY_DIGITS, QUANTITY_PLACES)(value)
    except ValidationError as exc:
        raise ValidationFailed(
            "VALIDATION_ERROR",
            f"Campo {field_name}: {'; '.join(exc.messages)}",
            field=field_name,
            **details,
        ) from exc


@dataclass
class IngredientLineDraft:
    """One line of a recipe being created (not yet persisted)."""

    target: IngredientTarget
    quantity: Decimal

    def __post_init__(self):
        self.quantity = to_decimal(self.quantity, "quantidade")


@dataclass
class RecipeDraft:
    """
    Recipe creation request.

    Validated by ``validate()`` before any database work happens.
    """

    name: str
    yield_quantity: Decimal | None
    yield_unit: str
    is_sub_recipe: bool = False
    lines: list[IngredientLineDraft] = field(default_factory=list)

    def validate(self) -> None:
        """
        Raise ValidationFailed if the draft cannot be persisted.

        Checks required fields, a non-empty ingredient list, and quantities
        that are positive and fit the storage precision. Does not touch the
        database.
        """
        if not self.name or not str(self.name).strip():
            raise ValidationFailed(
                "VALIDATION_ERROR", "Campo nome é obrigatório.", field="nome"
            )
        if self.yield_quantity is None:
            raise ValidationFailed(
                "VALIDATION_ERROR", "Campo rendimento é obrigatório.", field="rendimento"
            )
        self.yield_quantity = to_decimal(self.yield_quantity, "rendimento")
        check_precision(self.yield_quantity, "rendimento")
        if self.yield_quantity <= 0:
            raise ValidationFailed(
                "VALIDATION_ERROR",
                "Rendimento deve ser maior que zero.",
                field="rendimento",
            )
        if not self.yield_unit or not str(self.yield_unit).strip():
            raise ValidationFailed(
                "VALIDATION_ERROR",
                "Campo unidade_rendimento é obrigatório.",
                field="unidade_rendimento",
            )
        if not self.lines:
            raise ValidationFailed(
                "EMPTY_INGREDIENTS", "A receita precisa de pelo menos um ingrediente."
            )
        for index, line in enumerate(self.lines):
            check_precision(line.quantity, "quantidade", index=index)
            if line.quantity <= 0:
                raise ValidationFailed(
                    "VALIDATION_ERROR",
                    f"Ingrediente {index + 1}: quantidade deve ser maior que zero.",
                    field="quantidade",
                    index=index,
                )


def parse_ingredient(data: dict) -> IngredientLineDraft:
    """
    Parse a wire ingredient ``{"tipo", "id", "quantidade"}``.

    Example:
        parse_ingredient({"tipo": "materia_prima", "id": 1, "quantidade": 2.5})
        # IngredientLineDraft(target=RawMaterialTarget(id=1), quantity=Decimal("2.5"))
    """
    missing = [key for key in ("tipo", "id", "quantidade") if data.get(key) in (None, "")]
    if missing:
        raise ValidationFailed(
            "VALIDATION_ERROR",
            f"Ingrediente incompleto: {', '.join(missing)}.",
            fields=missing,
        )
    try:
        target = make_target(data["tipo"], data["id"])
    except (TypeError, ValueError):
        raise ValidationFailed(
            "VALIDATION_ERROR", "Campo id do ingrediente deve ser inteiro.", field="id"
        )
    return IngredientLineDraft(target=target, quantity=data["quantidade"])


def find_cycle(start: int, edges: Callable[[int], Iterable[int]]) -> list[int] | None:
    """
    Look for a cycle reachable from ``start``.

    Args:
        start: Recipe id to walk from.
        edges: Returns the sub-recipe ids directly used by a recipe id.

    Returns:
        The cycle as a list of recipe ids (first == last), or None.

    Example:
        graph = {1: [2], 2: [3], 3: [1]}
        find_cycle(1, lambda n: graph.get(n, []))  # [1, 2, 3, 1]
    """
    path: list[int] = []
    on_path: set[int] = set()
    done: set[int] = set()
    stack: list[tuple[int, Iterable[int] | None]] = [(start, None)]

    while stack:
        node, children = stack[-1]
        if children is None:
            path.append(node)
            on_path.add(node)
            children = iter(list(edges(node)))
            stack[-1] = (node, children)

        child = next(children, None)
        if child is None:
            stack.pop()
            path.pop()
            on_path.discard(node)
            done.add(node)
            continue

        if child in on_path:
            return path[path.index(child):] + [child]
        if child not in done:
            stack.append((child, None))

    return None
