"""
Shared fixtures for the Padaria test suite.
"""

from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from padaria.models import RawMaterial, Recipe, Role, User
from padaria.services.accounts import issue_token


# ═══════════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════════


def make_user(role, email=None, password="senha123"):
    return User.objects.create_user(
        email=email or f"{role.lower()}@padaria.test",
        password=password,
        name=f"Usuário {role}",
        role=role,
    )


@pytest.fixture
def admin(db):
    return make_user(Role.ADMIN)


@pytest.fixture
def producao(db):
    return make_user(Role.PRODUCAO)


@pytest.fixture
def pre_pesagem(db):
    return make_user(Role.PRE_PESAGEM)


@pytest.fixture
def consulta(db):
    return make_user(Role.CONSULTA)


@pytest.fixture
def client_for():
    """APIClient authenticated with a real bearer token for ``user``."""

    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")
        return client

    return _client


# ═══════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def farinha(db):
    return RawMaterial.objects.create(name="Farinha", unit="kg")


@pytest.fixture
def agua(db):
    return RawMaterial.objects.create(name="Água", unit="L")


@pytest.fixture
def sal(db):
    return RawMaterial.objects.create(name="Sal", unit="kg")


@pytest.fixture
def fermento(db):
    return RawMaterial.objects.create(name="Fermento", unit="kg")


@pytest.fixture
def massa_base(db, farinha, agua):
    """Sub-recipe: 10 kg of dough from 6 kg flour + 4 L water."""
    recipe = Recipe.objects.create(
        name="Massa Base",
        yield_quantity=Decimal("10"),
        yield_unit="kg",
        is_sub_recipe=True,
    )
    recipe.ingredients.create(position=0, raw_material=farinha, quantity=Decimal("6"))
    recipe.ingredients.create(position=1, raw_material=agua, quantity=Decimal("4"))
    return recipe
