"""
Kit assembly (pré-pesagem) using the French coefficient method.

Given a production order, calculates the total quantity of each raw
material needed, expanding sub-recipes recursively.

Referência: http://techno.boulangerie.free.fr/

Usage:
    from padaria.services.kits import build_kit, calculate_requirements

    for req in calculate_requirements(pao_frances, Decimal("20")):
        print(f"{req.raw_material.name}: {req.quantity} {req.unit}")

    kit = build_kit(order, user=operador)
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Generator

from django.db import DEFAULT_DB_ALIAS, IntegrityError, transaction

from padaria.conf import get_setting
from padaria.exceptions import Conflict, ValidationFailed
from padaria.models import Kit, KitItem, ProductionOrder, RawMaterial, Recipe
from padaria.results import Requirement

logger = logging.getLogger(__name__)

_QUANTUM = Decimal("0.001")


def expand_recipe(
    recipe: Recipe,
    coefficient: Decimal,
    trail: str,
    *,
    depth: int = 0,
    max_depth: int | None = None,
) -> Generator[tuple[RawMaterial, Decimal, str], None, None]:
    """
    Expand ingredient lines recursively through sub-recipes.

    Yields (raw_material, quantity_needed, trail) tuples for terminal
    ingredients only.

    Args:
        recipe:      The recipe to expand.
        coefficient: How many executions of ``recipe`` are needed.
        trail:       Human-readable recipe trail for ``used_in``.
        depth:       Current nesting depth.
        max_depth:   Deepest nesting allowed (MAX_COMPOSITION_DEPTH).
    """
    if max_depth is None:
        max_depth = get_setting("MAX_COMPOSITION_DEPTH")

    if depth >= max_depth:
        logger.warning(
            "Composition depth limit (%d) reached for recipe %s",
            max_depth,
            recipe.name,
        )
        raise ValidationFailed(
            "COMPOSITION_TOO_DEEP",
            f"Receita '{trail}' excede {max_depth} níveis de sub-receitas.",
            max_depth=max_depth,
        )

    lines = recipe.ingredients.select_related("raw_material", "sub_recipe").order_by(
        "position", "id"
    )
    for line in lines:
        if line.sub_recipe_id is not None:
            sub_recipe = line.sub_recipe
            # line.quantity is in the sub-recipe's yield unit
            sub_coef = (line.quantity * coefficient) / sub_recipe.yield_quantity
            yield from expand_recipe(
                sub_recipe,
                sub_coef,
                f"{trail} > {sub_recipe.name}",
                depth=depth + 1,
                max_depth=max_depth,
            )
        else:
            yield line.raw_material, line.quantity * coefficient, trail


def calculate_requirements(recipe: Recipe, quantity: Decimal) -> list[Requirement]:
    """
    Raw materials needed to produce ``quantity`` (in the recipe's yield unit).

    Returns one Requirement per raw material, sorted by name.
    """
    coefficient = Decimal(quantity) / recipe.yield_quantity

    totals: dict[int, Requirement] = {}
    for raw_material, qty_needed, trail in expand_recipe(recipe, coefficient, recipe.name):
        req = totals.get(raw_material.pk)
        if req is None:
            req = totals[raw_material.pk] = Requirement(raw_material, Decimal("0"))
        req.quantity += qty_needed
        if trail not in req.used_in:
            req.used_in.append(trail)

    result = sorted(totals.values(), key=lambda r: r.raw_material.name)
    for req in result:
        req.quantity = req.quantity.quantize(_QUANTUM)
    return result


def build_kit(order: ProductionOrder, user=None, using: str = DEFAULT_DB_ALIAS) -> Kit:
    """
    Create the pre-weighing kit of a production order.

    Kit and items are written in one transaction.

    Raises:
        ValidationFailed: order already completed or cancelled
        Conflict: order already has a kit
    """
    if not order.is_open:
        raise ValidationFailed(
            "INVALID_STATUS",
            f"Ordem {order.code} está {order.get_status_display()}.",
            current=order.status,
        )

    requirements = calculate_requirements(order.recipe, order.planned_quantity)

    try:
        with transaction.atomic(using=using):
            kit = Kit.objects.using(using).create(order=order)
            KitItem.objects.using(using).bulk_create(
                [
                    KitItem(kit=kit, raw_material=req.raw_material, quantity=req.quantity)
                    for req in requirements
                ]
            )
    except IntegrityError as exc:
        raise Conflict(
            "KIT_EXISTS", f"Ordem {order.code} já possui kit.", order=order.code
        ) from exc

    logger.info(
        f"Kit built for {order.code}: {len(requirements)} raw materials",
        extra={
            "order": order.pk,
            "code": order.code,
            "items": len(requirements),
            "user": getattr(user, "email", None),
        },
    )
    return kit
