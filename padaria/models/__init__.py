"""
Padaria Models.

- User: usuário com perfil de acesso (ADMIN, PRODUCAO, PRE_PESAGEM, CONSULTA)
- RawMaterial: matéria-prima (ingrediente terminal)
- Recipe: Bill of Materials (BOM) - defines HOW to make something
- IngredientLine: linha da receita (matéria-prima OU sub-receita)
- ProductionOrder: ordem de produção
- Kit / KitItem: pré-pesagem das matérias-primas de uma ordem
- CodeSequence: contador atômico para códigos de ordem
"""

from padaria.models.production import (
    Kit,
    KitItem,
    KitStatus,
    ProductionOrder,
    ProductionOrderStatus,
)
from padaria.models.raw_material import RawMaterial
from padaria.models.recipe import IngredientLine, Recipe
from padaria.models.sequence import CodeSequence
from padaria.models.user import Role, User

__all__ = [
    "User",
    "Role",
    "RawMaterial",
    "Recipe",
    "IngredientLine",
    "ProductionOrder",
    "ProductionOrderStatus",
    "Kit",
    "KitItem",
    "KitStatus",
    "CodeSequence",
]
