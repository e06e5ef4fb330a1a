"""
Padaria Settings.

Supports two formats (dict takes priority):

    # Option 1: Dict
    PADARIA = {
        "MAX_COMPOSITION_DEPTH": 10,
        "REQUIRE_SUB_RECIPE_FLAG": True,
    }

    # Option 2: Flat
    PADARIA_MAX_COMPOSITION_DEPTH = 10
    PADARIA_REQUIRE_SUB_RECIPE_FLAG = True

All settings have sensible defaults; zero configuration required.
The host project must still point AUTH_USER_MODEL at "padaria.User".
"""

from django.conf import settings


# ── Defaults ──

DEFAULTS = {
    # Deepest sub-recipe nesting followed when expanding a recipe into raw materials
    "MAX_COMPOSITION_DEPTH": 10,
    # Only recipes flagged is_sub_recipe may be used as ingredients
    "REQUIRE_SUB_RECIPE_FLAG": True,
    # Anonymous / non-admin callers may register ADMIN users
    "ALLOW_ADMIN_SELF_REGISTRATION": False,
    "ORDER_CODE_PREFIX": "OP",
}


# ── Accessors ──

_sentinel = object()


def get_setting(name, default=_sentinel):
    """
    Get a padaria setting.

    Looks up in order:
    1. PADARIA dict (e.g. PADARIA = {"MAX_COMPOSITION_DEPTH": 5})
    2. Flat setting (e.g. PADARIA_MAX_COMPOSITION_DEPTH = 5)
    3. DEFAULTS
    """
    padaria_dict = getattr(settings, "PADARIA", {})
    if name in padaria_dict:
        return padaria_dict[name]

    flat_value = getattr(settings, f"PADARIA_{name}", _sentinel)
    if flat_value is not _sentinel:
        return flat_value

    if default is not _sentinel:
        return default

    return DEFAULTS.get(name)
