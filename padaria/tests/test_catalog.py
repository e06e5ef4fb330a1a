"""
Tests for the recipe composition store (padaria.services.catalog).

Verifies that:
- create_recipe writes the recipe and every ingredient line, or nothing
- each persisted line has exactly one populated reference
- validation and role failures happen before any write
- duplicate names surface as Conflict
"""

import threading
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.core.exceptions import ValidationError
from django.db import (
    DatabaseError,
    IntegrityError,
    OperationalError,
    connections,
    transaction,
)
from django.db.models import ProtectedError, Q

from padaria.composition import (
    IngredientLineDraft,
    RawMaterialTarget,
    RecipeDraft,
    SubRecipeTarget,
    parse_ingredient,
)
from padaria.exceptions import (
    Conflict,
    Forbidden,
    NotFound,
    StorageError,
    StorageUnavailable,
    ValidationFailed,
)
from padaria.models import IngredientLine, RawMaterial, Recipe, Role
from padaria.services.catalog import CompositionStore, catalog
from padaria.signals import recipe_created


def counts():
    return (
        Recipe.objects.count(),
        IngredientLine.objects.count(),
        RawMaterial.objects.count(),
    )


def pao_frances(farinha_id, sub_recipe_id, name="Pão Francês"):
    return RecipeDraft(
        name=name,
        yield_quantity=Decimal("10"),
        yield_unit="kg",
        is_sub_recipe=False,
        lines=[
            parse_ingredient({"tipo": "materia_prima", "id": farinha_id, "quantidade": 2.5}),
            parse_ingredient({"tipo": "sub_receita", "id": sub_recipe_id, "quantidade": 1.0}),
        ],
    )


# ═══════════════════════════════════════════════════════════════════
# Raw materials
# ═══════════════════════════════════════════════════════════════════


class TestRawMaterials:
    def test_admin_creates_raw_material(self, db):
        material = catalog.create_raw_material("Farinha", "kg", role=Role.ADMIN)

        assert material.pk is not None
        assert RawMaterial.objects.get(pk=material.pk).unit == "kg"

    def test_input_is_stripped(self, db):
        material = catalog.create_raw_material("  Manteiga ", " kg ", role=Role.ADMIN)
        assert material.name == "Manteiga"
        assert material.unit == "kg"

    @pytest.mark.parametrize("role", [Role.PRODUCAO, Role.PRE_PESAGEM, Role.CONSULTA, None])
    def test_non_admin_forbidden_without_writes(self, db, role):
        before = counts()

        with pytest.raises(Forbidden) as exc:
            catalog.create_raw_material("Farinha", "kg", role=role)

        assert exc.value.status_code == 403
        assert counts() == before

    @pytest.mark.parametrize("name,unit", [("", "kg"), ("Farinha", ""), (None, "kg")])
    def test_blank_fields_rejected(self, db, name, unit):
        with pytest.raises(ValidationFailed):
            catalog.create_raw_material(name, unit, role=Role.ADMIN)
        assert RawMaterial.objects.count() == 0

    @pytest.mark.parametrize("name,unit", [("F" * 151, "kg"), ("Farinha", "k" * 21)])
    def test_overlong_fields_rejected(self, db, name, unit, django_assert_num_queries):
        with django_assert_num_queries(0), pytest.raises(ValidationFailed) as exc:
            catalog.create_raw_material(name, unit, role=Role.ADMIN)

        assert exc.value.status_code == 400
        assert RawMaterial.objects.count() == 0

    def test_duplicate_name_conflict(self, db):
        """Second 'Farinha' fails with Conflict; exactly one row remains."""
        catalog.create_raw_material("Farinha", "kg", role=Role.ADMIN)

        with pytest.raises(Conflict) as exc:
            catalog.create_raw_material("Farinha", "kg", role=Role.ADMIN)

        assert exc.value.code == "DUPLICATE_NAME"
        assert exc.value.status_code == 409
        assert RawMaterial.objects.filter(name="Farinha").count() == 1

    def test_list_ordered_by_name(self, db):
        for name in ("Sal", "Açúcar", "Farinha"):
            RawMaterial.objects.create(name=name, unit="kg")

        names = [m.name for m in catalog.list_raw_materials()]
        assert names == sorted(names)
        assert len(names) == 3

    def test_unreachable_database(self, db):
        with patch("padaria.services.catalog.RawMaterial") as model:
            model.objects.using.side_effect = OperationalError("connection refused")
            with pytest.raises(StorageUnavailable) as exc:
                catalog.list_raw_materials()

        assert exc.value.status_code == 503


@pytest.mark.django_db(transaction=True, databases=["shared"])
class TestConcurrentRawMaterials:
    """Simultaneous creations race on separate connections to one database."""

    def test_two_simultaneous_farinha_one_winner(self):
        store = CompositionStore(using="shared")
        barrier = threading.Barrier(2)
        outcomes = []

        def create():
            try:
                barrier.wait(timeout=10)
                store.create_raw_material("Farinha", "kg", role=Role.ADMIN)
                outcomes.append("created")
            except Conflict as exc:
                outcomes.append(exc.code)
            finally:
                connections["shared"].close()

        threads = [threading.Thread(target=create) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert sorted(outcomes) == ["DUPLICATE_NAME", "created"]
        assert RawMaterial.objects.using("shared").filter(name="Farinha").count() == 1


# ═══════════════════════════════════════════════════════════════════
# create_recipe: success
# ═══════════════════════════════════════════════════════════════════


class TestCreateRecipe:
    def test_pao_frances_scenario(self, db, farinha, massa_base):
        result = catalog.create_recipe(
            pao_frances(farinha.pk, massa_base.pk), role=Role.ADMIN
        )

        assert result.success
        assert result.lines_created == 2
        assert "Pão Francês" in [r.name for r in catalog.list_recipes()]

        lines = list(IngredientLine.objects.filter(recipe_id=result.recipe_id))
        assert len(lines) == 2
        assert lines[0].raw_material_id == farinha.pk
        assert lines[0].sub_recipe_id is None
        assert lines[0].quantity == Decimal("2.5")
        assert lines[1].sub_recipe_id == massa_base.pk
        assert lines[1].raw_material_id is None
        assert lines[1].quantity == Decimal("1.0")

    def test_lines_match_input_discriminators(self, db, farinha, agua, sal, massa_base):
        targets = [
            RawMaterialTarget(farinha.pk),
            SubRecipeTarget(massa_base.pk),
            RawMaterialTarget(sal.pk),
            RawMaterialTarget(agua.pk),
        ]
        draft = RecipeDraft(
            name="Baguete",
            yield_quantity=Decimal("5"),
            yield_unit="kg",
            lines=[IngredientLineDraft(t, Decimal("0.5")) for t in targets],
        )

        result = catalog.create_recipe(draft, role=Role.ADMIN)

        recipe = catalog.get_recipe(result.recipe_id)
        assert [line.target for line in recipe.ingredients.all()] == targets

    def test_every_line_has_exactly_one_reference(self, db, farinha, massa_base):
        catalog.create_recipe(pao_frances(farinha.pk, massa_base.pk), role=Role.ADMIN)

        both = Q(raw_material__isnull=False, sub_recipe__isnull=False)
        neither = Q(raw_material__isnull=True, sub_recipe__isnull=True)
        assert not IngredientLine.objects.filter(both | neither).exists()

    def test_flags_and_yield_persisted(self, db, farinha):
        draft = RecipeDraft(
            name="Fermento Natural",
            yield_quantity="1.250",
            yield_unit="kg",
            is_sub_recipe=True,
            lines=[IngredientLineDraft(RawMaterialTarget(farinha.pk), "1")],
        )

        result = catalog.create_recipe(draft, role=Role.ADMIN)

        recipe = Recipe.objects.get(pk=result.recipe_id)
        assert recipe.is_sub_recipe is True
        assert recipe.yield_quantity == Decimal("1.250")

    def test_history_recorded(self, db, farinha, massa_base):
        result = catalog.create_recipe(
            pao_frances(farinha.pk, massa_base.pk), role=Role.ADMIN
        )

        recipe = Recipe.objects.get(pk=result.recipe_id)
        assert recipe.history.count() == 1
        assert recipe.history.first().history_type == "+"

    def test_signal_sent_after_commit(
        self, db, farinha, massa_base, admin, django_capture_on_commit_callbacks
    ):
        received = []

        def handler(sender, recipe, lines_created, user, **kwargs):
            received.append((recipe.name, lines_created, user))

        recipe_created.connect(handler)
        try:
            with django_capture_on_commit_callbacks(execute=True) as callbacks:
                catalog.create_recipe(
                    pao_frances(farinha.pk, massa_base.pk), role=Role.ADMIN, user=admin
                )
        finally:
            recipe_created.disconnect(handler)

        assert len(callbacks) == 1
        assert received == [("Pão Francês", 2, admin)]


# ═══════════════════════════════════════════════════════════════════
# create_recipe: failures write nothing
# ═══════════════════════════════════════════════════════════════════


class TestCreateRecipeRollback:
    def test_missing_sub_recipe_rolls_back(self, db, farinha, massa_base):
        """Same call with an unknown sub-recipe id: nothing persisted."""
        missing_id = massa_base.pk + 1000
        before = counts()

        with pytest.raises(StorageError) as exc:
            catalog.create_recipe(pao_frances(farinha.pk, missing_id), role=Role.ADMIN)

        assert exc.value.code == "REFERENCE_NOT_FOUND"
        assert exc.value.details["index"] == 1
        assert counts() == before
        assert "Pão Francês" not in [r.name for r in catalog.list_recipes()]
        assert not IngredientLine.objects.filter(recipe__name="Pão Francês").exists()

    def test_missing_raw_material_rolls_back(self, db, farinha, massa_base):
        before = counts()

        with pytest.raises(StorageError) as exc:
            catalog.create_recipe(
                pao_frances(farinha.pk + 1000, massa_base.pk), role=Role.ADMIN
            )

        assert exc.value.code == "REFERENCE_NOT_FOUND"
        assert exc.value.details["index"] == 0
        assert counts() == before

    def test_sub_recipe_not_flagged(self, db, farinha):
        plain = Recipe.objects.create(
            name="Pão de Forma", yield_quantity=Decimal("1"), yield_unit="un"
        )
        before = counts()

        with pytest.raises(StorageError) as exc:
            catalog.create_recipe(pao_frances(farinha.pk, plain.pk), role=Role.ADMIN)

        assert exc.value.code == "NOT_A_SUB_RECIPE"
        assert counts() == before

    def test_sub_recipe_flag_can_be_relaxed(self, db, settings, farinha):
        settings.PADARIA = {"REQUIRE_SUB_RECIPE_FLAG": False}
        plain = Recipe.objects.create(
            name="Pão de Forma", yield_quantity=Decimal("1"), yield_unit="un"
        )

        result = catalog.create_recipe(pao_frances(farinha.pk, plain.pk), role=Role.ADMIN)

        assert IngredientLine.objects.filter(recipe_id=result.recipe_id).count() == 2

    def test_self_reference_is_a_cycle(self, db, farinha, massa_base):
        """A line naming the id the new recipe is about to get."""
        next_id = massa_base.pk + 1
        before = counts()

        with pytest.raises(StorageError) as exc:
            catalog.create_recipe(pao_frances(farinha.pk, next_id), role=Role.ADMIN)

        assert exc.value.code == "CYCLE_DETECTED"
        assert counts() == before

    def test_database_error_mid_loop_rolls_back(self, db, farinha, massa_base):
        before = counts()
        real_save = IngredientLine.save
        calls = []

        def flaky_save(line, *args, **kwargs):
            calls.append(line.position)
            if line.position == 1:
                raise DatabaseError("disk I/O error")
            return real_save(line, *args, **kwargs)

        with patch.object(IngredientLine, "save", flaky_save):
            with pytest.raises(StorageError) as exc:
                catalog.create_recipe(
                    pao_frances(farinha.pk, massa_base.pk), role=Role.ADMIN
                )

        assert calls == [0, 1]
        assert exc.value.code == "STORAGE_ERROR"
        assert exc.value.status_code == 500
        assert counts() == before

    def test_duplicate_recipe_name_conflict(self, db, farinha, massa_base):
        before = counts()

        with pytest.raises(Conflict) as exc:
            catalog.create_recipe(
                pao_frances(farinha.pk, massa_base.pk, name="Massa Base"),
                role=Role.ADMIN,
            )

        assert exc.value.code == "DUPLICATE_NAME"
        assert counts() == before

    def test_no_signal_on_rollback(
        self, db, farinha, massa_base, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks() as callbacks:
            with pytest.raises(StorageError):
                catalog.create_recipe(
                    pao_frances(farinha.pk, massa_base.pk + 1000), role=Role.ADMIN
                )

        assert callbacks == []


class TestCreateRecipeValidation:
    """Validation and role failures never reach the database."""

    def test_empty_ingredients(self, db, django_assert_num_queries):
        draft = RecipeDraft(name="Vazia", yield_quantity=1, yield_unit="kg", lines=[])

        with django_assert_num_queries(0), pytest.raises(ValidationFailed) as exc:
            catalog.create_recipe(draft, role=Role.ADMIN)

        assert exc.value.code == "EMPTY_INGREDIENTS"
        assert Recipe.objects.count() == 0

    @pytest.mark.parametrize(
        "overrides",
        [{"name": ""}, {"yield_quantity": None}, {"yield_unit": ""}],
    )
    def test_missing_fields(self, db, farinha, django_assert_num_queries, overrides):
        values = {
            "name": "Pão",
            "yield_quantity": 1,
            "yield_unit": "kg",
            "lines": [IngredientLineDraft(RawMaterialTarget(farinha.pk), 1)],
        }
        values.update(overrides)

        with django_assert_num_queries(0), pytest.raises(ValidationFailed) as exc:
            catalog.create_recipe(RecipeDraft(**values), role=Role.ADMIN)

        assert exc.value.code == "VALIDATION_ERROR"
        assert Recipe.objects.count() == 0

    @pytest.mark.parametrize("quantity", ["12345678901", "0.0004", "NaN"])
    def test_quantity_must_fit_storage_precision(
        self, db, farinha, django_assert_num_queries, quantity
    ):
        draft = RecipeDraft(
            name="Pão",
            yield_quantity=1,
            yield_unit="kg",
            lines=[IngredientLineDraft(RawMaterialTarget(farinha.pk), quantity)],
        )

        with django_assert_num_queries(0), pytest.raises(ValidationFailed) as exc:
            catalog.create_recipe(draft, role=Role.ADMIN)

        assert exc.value.details["field"] == "quantidade"
        assert exc.value.details["index"] == 0
        assert Recipe.objects.count() == 0
        assert IngredientLine.objects.count() == 0

    def test_yield_must_fit_storage_precision(
        self, db, farinha, django_assert_num_queries
    ):
        draft = RecipeDraft(
            name="Pão",
            yield_quantity="0.0001",
            yield_unit="kg",
            lines=[IngredientLineDraft(RawMaterialTarget(farinha.pk), 1)],
        )

        with django_assert_num_queries(0), pytest.raises(ValidationFailed) as exc:
            catalog.create_recipe(draft, role=Role.ADMIN)

        assert exc.value.details["field"] == "rendimento"
        assert Recipe.objects.count() == 0

    def test_non_admin_forbidden(
        self, db, farinha, massa_base, django_assert_num_queries
    ):
        before = counts()

        with django_assert_num_queries(0), pytest.raises(Forbidden):
            catalog.create_recipe(
                pao_frances(farinha.pk, massa_base.pk), role=Role.PRODUCAO
            )

        assert counts() == before


# ═══════════════════════════════════════════════════════════════════
# Reads
# ═══════════════════════════════════════════════════════════════════


class TestReads:
    def test_list_recipes_ordered_by_name(self, db, farinha, massa_base):
        catalog.create_recipe(pao_frances(farinha.pk, massa_base.pk), role=Role.ADMIN)
        catalog.create_recipe(
            pao_frances(farinha.pk, massa_base.pk, name="Bisnaga"), role=Role.ADMIN
        )

        assert [r.name for r in catalog.list_recipes()] == [
            "Bisnaga",
            "Massa Base",
            "Pão Francês",
        ]

    def test_get_recipe_lines_in_input_order(self, db, farinha, massa_base):
        recipe = catalog.get_recipe(massa_base.pk)

        assert [line.raw_material.name for line in recipe.ingredients.all()] == [
            "Farinha",
            "Água",
        ]

    def test_get_missing_recipe(self, db):
        with pytest.raises(NotFound) as exc:
            catalog.get_recipe(999)
        assert exc.value.code == "RECIPE_NOT_FOUND"

    def test_store_bound_to_alias(self, db, farinha):
        store = CompositionStore(using="default")
        assert [m.pk for m in store.list_raw_materials()] == [farinha.pk]


# ═══════════════════════════════════════════════════════════════════
# Storage-level invariants
# ═══════════════════════════════════════════════════════════════════


class TestIngredientLineConstraints:
    """The database itself rejects rows that bypass the model layer."""

    def test_neither_reference_rejected(self, db, massa_base):
        with pytest.raises(IntegrityError), transaction.atomic():
            IngredientLine.objects.bulk_create(
                [IngredientLine(recipe=massa_base, quantity=Decimal("1"))]
            )

    def test_both_references_rejected(self, db, farinha, massa_base):
        other = Recipe.objects.create(
            name="Outra", yield_quantity=Decimal("1"), yield_unit="kg"
        )
        with pytest.raises(IntegrityError), transaction.atomic():
            IngredientLine.objects.bulk_create(
                [
                    IngredientLine(
                        recipe=other,
                        raw_material=farinha,
                        sub_recipe=massa_base,
                        quantity=Decimal("1"),
                    )
                ]
            )

    def test_self_reference_rejected(self, db, massa_base):
        with pytest.raises(IntegrityError), transaction.atomic():
            IngredientLine.objects.bulk_create(
                [
                    IngredientLine(
                        recipe=massa_base, sub_recipe=massa_base, quantity=Decimal("1")
                    )
                ]
            )

    def test_non_positive_quantity_rejected(self, db, farinha, massa_base):
        with pytest.raises(IntegrityError), transaction.atomic():
            IngredientLine.objects.bulk_create(
                [IngredientLine(recipe=massa_base, raw_material=farinha, quantity=0)]
            )

    @pytest.mark.parametrize("quantity", ["12345678901", "0.0004"])
    def test_quantity_beyond_column_precision_rejected(
        self, db, farinha, massa_base, quantity
    ):
        before = IngredientLine.objects.count()

        with pytest.raises(ValidationError) as exc:
            IngredientLine(
                recipe=massa_base, raw_material=farinha, quantity=Decimal(quantity)
            ).save()

        assert "quantity" in exc.value.message_dict
        assert IngredientLine.objects.count() == before

    def test_referenced_raw_material_cannot_be_deleted(self, db, farinha, massa_base):
        with pytest.raises(ProtectedError):
            farinha.delete()
        assert IngredientLine.objects.filter(raw_material=farinha).count() == 1

    def test_referenced_sub_recipe_cannot_be_deleted(self, db, farinha, massa_base):
        catalog.create_recipe(pao_frances(farinha.pk, massa_base.pk), role=Role.ADMIN)

        with pytest.raises(ProtectedError):
            massa_base.delete()

    def test_deleting_recipe_cascades_to_its_lines(self, db, farinha, massa_base):
        result = catalog.create_recipe(
            pao_frances(farinha.pk, massa_base.pk), role=Role.ADMIN
        )

        Recipe.objects.get(pk=result.recipe_id).delete()

        assert not IngredientLine.objects.filter(recipe_id=result.recipe_id).exists()
        assert Recipe.objects.filter(pk=massa_base.pk).exists()
