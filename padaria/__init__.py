"""
Django Padaria - bakery production backend.

Raw materials, recipes composed of raw materials and sub-recipes,
production orders and pre-weighing kits, behind role-checked JWT auth.

Usage:
    from padaria import catalog, PadariaError
    from padaria.composition import IngredientLineDraft, RawMaterialTarget, RecipeDraft

    draft = RecipeDraft(
        name="Pão Francês",
        yield_quantity=10,
        yield_unit="kg",
        lines=[IngredientLineDraft(RawMaterialTarget(farinha.pk), "2.5")],
    )
    try:
        result = catalog.create_recipe(draft, role=user.role)
    except PadariaError as e:
        print(e.code, e.message)
"""

from padaria.exceptions import PadariaError


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name == "catalog":
        from padaria.services.catalog import catalog

        return catalog
    if name == "CompositionStore":
        from padaria.services.catalog import CompositionStore

        return CompositionStore
    if name == "RecipeCreated":
        from padaria.results import RecipeCreated

        return RecipeCreated
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["catalog", "CompositionStore", "PadariaError", "RecipeCreated"]
__version__ = "0.1.0"
