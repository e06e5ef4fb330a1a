"""
Tests for production orders, code sequences and pre-weighing kits
(padaria.models.production, padaria.models.sequence, padaria.services.kits).
"""

from decimal import Decimal

import pytest
from django.utils import timezone

from padaria.exceptions import Conflict, ValidationFailed
from padaria.models import (
    CodeSequence,
    Kit,
    KitStatus,
    ProductionOrder,
    ProductionOrderStatus,
    Recipe,
)
from padaria.services.kits import build_kit, calculate_requirements
from padaria.signals import production_completed


# ═══════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def pao_frances(db, sal, fermento, massa_base):
    """
    10 kg of bread: 8 kg Massa Base + 0.2 kg salt + 0.1 kg yeast.

    Massa Base yields 10 kg from 6 kg flour + 4 L water.
    """
    recipe = Recipe.objects.create(
        name="Pão Francês", yield_quantity=Decimal("10"), yield_unit="kg"
    )
    recipe.ingredients.create(position=0, sub_recipe=massa_base, quantity=Decimal("8"))
    recipe.ingredients.create(position=1, raw_material=sal, quantity=Decimal("0.2"))
    recipe.ingredients.create(position=2, raw_material=fermento, quantity=Decimal("0.1"))
    return recipe


@pytest.fixture
def order(db, pao_frances, admin):
    return ProductionOrder.objects.create(
        recipe=pao_frances, planned_quantity=Decimal("20"), created_by=admin
    )


# ═══════════════════════════════════════════════════════════════════
# CodeSequence
# ═══════════════════════════════════════════════════════════════════


class TestCodeSequence:
    def test_next_value_starts_at_1(self, db):
        assert CodeSequence.next_value("TEST") == 1

    def test_next_value_increments(self, db):
        values = [CodeSequence.next_value("INC") for _ in range(3)]
        assert values == [1, 2, 3]

    def test_different_prefixes_independent(self, db):
        CodeSequence.next_value("A")
        CodeSequence.next_value("A")
        assert CodeSequence.next_value("B") == 1


# ═══════════════════════════════════════════════════════════════════
# ProductionOrder
# ═══════════════════════════════════════════════════════════════════


class TestProductionOrderCode:
    def test_code_generated(self, order):
        year = timezone.now().year
        assert order.code == f"OP-{year}-00001"

    def test_codes_are_sequential(self, order, pao_frances):
        second = ProductionOrder.objects.create(
            recipe=pao_frances, planned_quantity=Decimal("5")
        )
        assert second.code.endswith("-00002")

    def test_explicit_code_kept(self, db, pao_frances):
        order = ProductionOrder.objects.create(
            code="ESPECIAL-1", recipe=pao_frances, planned_quantity=Decimal("1")
        )
        assert order.code == "ESPECIAL-1"

    def test_prefix_from_settings(self, db, settings, pao_frances):
        settings.PADARIA = {"ORDER_CODE_PREFIX": "PROD"}
        order = ProductionOrder.objects.create(
            recipe=pao_frances, planned_quantity=Decimal("1")
        )
        assert order.code.startswith("PROD-")


class TestProductionOrderTransitions:
    def test_start(self, order, producao):
        order.start(user=producao)

        order.refresh_from_db()
        assert order.status == ProductionOrderStatus.IN_PROGRESS
        assert order.started_at is not None

    def test_start_twice_rejected(self, order):
        order.start()

        with pytest.raises(ValidationFailed) as exc:
            order.start()
        assert exc.value.code == "INVALID_STATUS"
        assert exc.value.details["current"] == "in_progress"

    def test_complete_defaults_to_planned(self, order):
        order.start()
        order.complete()

        order.refresh_from_db()
        assert order.status == ProductionOrderStatus.COMPLETED
        assert order.actual_quantity == Decimal("20")
        assert order.loss_quantity == Decimal("0")

    def test_complete_with_loss(self, order):
        order.start()
        order.complete(actual_quantity=18.5)

        assert order.actual_quantity == Decimal("18.5")
        assert order.loss_quantity == Decimal("1.5")

    def test_complete_negative_rejected(self, order):
        order.start()

        with pytest.raises(ValidationFailed):
            order.complete(actual_quantity=-1)
        order.refresh_from_db()
        assert order.status == ProductionOrderStatus.IN_PROGRESS

    def test_complete_requires_in_progress(self, order):
        with pytest.raises(ValidationFailed) as exc:
            order.complete()
        assert exc.value.code == "INVALID_STATUS"

    def test_complete_sends_signal_on_commit(
        self, order, producao, django_capture_on_commit_callbacks
    ):
        received = []

        def handler(sender, order, actual_quantity, user, **kwargs):
            received.append((order.code, actual_quantity, user))

        production_completed.connect(handler)
        try:
            order.start()
            with django_capture_on_commit_callbacks(execute=True):
                order.complete(actual_quantity=Decimal("19"), user=producao)
        finally:
            production_completed.disconnect(handler)

        assert received == [(order.code, Decimal("19"), producao)]

    def test_cancel_pending(self, order):
        order.cancel(reason="Falta de farinha")

        order.refresh_from_db()
        assert order.status == ProductionOrderStatus.CANCELLED
        assert "[CANCELADA] Falta de farinha" in order.notes
        assert not order.is_open

    def test_cancel_completed_rejected(self, order):
        order.start()
        order.complete()

        with pytest.raises(ValidationFailed):
            order.cancel()

    def test_transitions_recorded_in_history(self, order):
        order.start()
        order.complete()

        statuses = [h.status for h in order.history.order_by("history_id")]
        assert statuses == ["pending", "in_progress", "completed"]


# ═══════════════════════════════════════════════════════════════════
# Requirements (French coefficient)
# ═══════════════════════════════════════════════════════════════════


class TestCalculateRequirements:
    def test_expands_sub_recipes(self, pao_frances):
        """
        20 kg of bread = 2x the recipe.

        Massa Base: 8 kg x 2 = 16 kg of dough = 1.6x its 10 kg yield,
        so 9.6 kg flour and 6.4 L water.
        """
        reqs = {r.raw_material.name: r for r in calculate_requirements(pao_frances, 20)}

        assert reqs["Farinha"].quantity == Decimal("9.600")
        assert reqs["Água"].quantity == Decimal("6.400")
        assert reqs["Sal"].quantity == Decimal("0.400")
        assert reqs["Fermento"].quantity == Decimal("0.200")
        assert reqs["Água"].unit == "L"

    def test_sorted_by_name(self, pao_frances):
        names = [r.raw_material.name for r in calculate_requirements(pao_frances, 10)]
        assert names == ["Farinha", "Fermento", "Sal", "Água"]

    def test_used_in_trail(self, pao_frances):
        reqs = {r.raw_material.name: r for r in calculate_requirements(pao_frances, 10)}

        assert reqs["Farinha"].used_in == ["Pão Francês > Massa Base"]
        assert reqs["Sal"].used_in == ["Pão Francês"]

    def test_same_raw_material_aggregated(self, pao_frances, farinha):
        pao_frances.ingredients.create(
            position=3, raw_material=farinha, quantity=Decimal("0.4")
        )

        reqs = {r.raw_material.name: r for r in calculate_requirements(pao_frances, 10)}

        # 4.8 kg via Massa Base + 0.4 kg direct
        assert reqs["Farinha"].quantity == Decimal("5.200")
        assert len(reqs["Farinha"].used_in) == 2

    def test_depth_limit(self, settings, pao_frances):
        settings.PADARIA = {"MAX_COMPOSITION_DEPTH": 1}

        with pytest.raises(ValidationFailed) as exc:
            calculate_requirements(pao_frances, 10)
        assert exc.value.code == "COMPOSITION_TOO_DEEP"


# ═══════════════════════════════════════════════════════════════════
# Kits
# ═══════════════════════════════════════════════════════════════════


class TestBuildKit:
    def test_build_kit(self, order, pre_pesagem):
        kit = build_kit(order, user=pre_pesagem)

        assert kit.status == KitStatus.PENDING
        items = {i.raw_material.name: i.quantity for i in kit.items.all()}
        assert items == {
            "Farinha": Decimal("9.600"),
            "Água": Decimal("6.400"),
            "Sal": Decimal("0.400"),
            "Fermento": Decimal("0.200"),
        }

    def test_one_kit_per_order(self, order):
        build_kit(order)

        with pytest.raises(Conflict) as exc:
            build_kit(order)
        assert exc.value.code == "KIT_EXISTS"
        assert Kit.objects.filter(order=order).count() == 1

    def test_closed_order_rejected(self, order):
        order.cancel()

        with pytest.raises(ValidationFailed) as exc:
            build_kit(order)
        assert exc.value.code == "INVALID_STATUS"
        assert not Kit.objects.exists()

    def test_assemble(self, order, pre_pesagem):
        kit = build_kit(order)

        kit.assemble(user=pre_pesagem)

        kit.refresh_from_db()
        assert kit.status == KitStatus.ASSEMBLED
        assert kit.assembled_by == pre_pesagem
        assert kit.assembled_at is not None

    def test_assemble_twice_rejected(self, order):
        kit = build_kit(order)
        kit.assemble()

        with pytest.raises(ValidationFailed):
            kit.assemble()
