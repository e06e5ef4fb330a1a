"""
Padaria Result Types.

Structured results for catalog and production operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from padaria.models import RawMaterial


@dataclass
class RecipeCreated:
    """
    Resultado da criação de receita.

    Only returned on commit; every failure path raises instead.
    """

    recipe_id: int
    lines_created: int
    success: bool = True


@dataclass
class Requirement:
    """Matéria-prima necessária para produzir uma quantidade de receita."""

    raw_material: RawMaterial
    quantity: Decimal
    used_in: list[str] = field(default_factory=list)

    @property
    def unit(self) -> str:
        return self.raw_material.unit
