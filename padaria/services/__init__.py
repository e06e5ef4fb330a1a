"""
Padaria Services.

Business logic that doesn't belong in models:
- catalog: raw materials and recipes (atomic recipe creation)
- kits: raw-material requirements and pre-weighing kits
- accounts: registration, login and JWT issuance
"""

from padaria.services.catalog import CompositionStore, catalog
from padaria.services.kits import build_kit, calculate_requirements

__all__ = [
    "CompositionStore",
    "catalog",
    "build_kit",
    "calculate_requirements",
]
