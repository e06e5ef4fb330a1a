"""
ProductionOrder, Kit and KitItem models.

ProductionOrder = request to produce a quantity of a recipe.
Kit = raw materials pre-weighed for one production order (pré-pesagem).

✅ STATUS TRANSITIONS ENCAPSULATED IN THE MODELS
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db import models, transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from padaria.conf import get_setting
from padaria.exceptions import ValidationFailed
from padaria.models.sequence import CodeSequence

logger = logging.getLogger(__name__)


class ProductionOrderStatus(models.TextChoices):
    """ProductionOrder lifecycle status."""

    PENDING = "pending", _("Pendente")
    IN_PROGRESS = "in_progress", _("Em Produção")
    COMPLETED = "completed", _("Concluída")
    CANCELLED = "cancelled", _("Cancelada")


class ProductionOrder(models.Model):
    """
    Ordem de produção.

    Status: PENDING → IN_PROGRESS → COMPLETED
            PENDING | IN_PROGRESS → CANCELLED
    """

    code = models.CharField(
        unique=True,
        max_length=50,
        blank=True,
        verbose_name=_("Código"),
        help_text=_("Identificador único (auto-gerado se vazio)"),
    )

    recipe = models.ForeignKey(
        "padaria.Recipe",
        on_delete=models.PROTECT,
        related_name="production_orders",
        verbose_name=_("Receita"),
    )

    # Quantities (in the recipe's yield unit)
    planned_quantity = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        verbose_name=_("Planejado"),
        help_text=_("Quantidade planejada, na unidade de rendimento da receita"),
    )
    actual_quantity = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        null=True,
        blank=True,
        verbose_name=_("Quantidade Real"),
    )

    status = models.CharField(
        max_length=20,
        choices=ProductionOrderStatus.choices,
        default=ProductionOrderStatus.PENDING,
        db_index=True,
        verbose_name=_("Status"),
    )

    started_at = models.DateTimeField(null=True, blank=True, verbose_name=_("Início Real"))
    completed_at = models.DateTimeField(null=True, blank=True, verbose_name=_("Fim Real"))

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="production_orders",
        verbose_name=_("Criado por"),
    )

    notes = models.TextField(blank=True, verbose_name=_("Observações"))

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Criado em"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Atualizado em"))

    history = HistoricalRecords()

    class Meta:
        db_table = "padaria_ordem_producao"
        verbose_name = _("Ordem de Produção")
        verbose_name_plural = _("Ordens de Produção")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(planned_quantity__gt=0),
                name="ordem_quantidade_positiva",
            ),
        ]
        indexes = [
            models.Index(fields=["recipe", "status"], name="ordem_receita_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.code or f'OP-{self.pk}'} - {self.recipe.name}"

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = self._generate_code(kwargs.get("using"))
        super().save(*args, **kwargs)

    def _generate_code(self, using=None) -> str:
        """Generate order code in format OP-YYYY-NNNNN."""
        prefix = f"{get_setting('ORDER_CODE_PREFIX')}-{timezone.now().year}"
        return f"{prefix}-{CodeSequence.next_value(prefix, using=using):05d}"

    # ══════════════════════════════════════════════════════════════
    # STATUS TRANSITIONS
    # ══════════════════════════════════════════════════════════════

    def _require_status(self, *allowed):
        if self.status not in allowed:
            raise ValidationFailed(
                "INVALID_STATUS",
                f"Ordem {self.code} está {self.get_status_display()}.",
                current=self.status,
                expected=[str(s) for s in allowed],
            )

    def start(self, user=None):
        """Inicia a produção."""
        self._require_status(ProductionOrderStatus.PENDING)

        self.status = ProductionOrderStatus.IN_PROGRESS
        self.started_at = timezone.now()
        self.save(update_fields=["status", "started_at", "updated_at"])

        logger.info(
            f"ProductionOrder {self.code} started",
            extra={"order": self.pk, "code": self.code, "user": _username(user)},
        )

    def complete(self, actual_quantity: Decimal | int | float | None = None, user=None):
        """
        Finaliza produção.

        actual_quantity defaults to planned_quantity.
        Emits ``production_completed``.
        """
        self._require_status(ProductionOrderStatus.IN_PROGRESS)

        if actual_quantity is None:
            actual_quantity = self.planned_quantity
        elif not isinstance(actual_quantity, Decimal):
            actual_quantity = Decimal(str(actual_quantity))

        if actual_quantity < 0:
            raise ValidationFailed(
                "VALIDATION_ERROR", "Quantidade real não pode ser negativa."
            )

        self.status = ProductionOrderStatus.COMPLETED
        self.actual_quantity = actual_quantity
        self.completed_at = timezone.now()
        self.save(
            update_fields=["status", "actual_quantity", "completed_at", "updated_at"]
        )

        logger.info(
            f"ProductionOrder {self.code} completed: {actual_quantity} produced",
            extra={
                "order": self.pk,
                "code": self.code,
                "actual_quantity": float(actual_quantity),
                "planned_quantity": float(self.planned_quantity),
            },
        )

        from padaria.signals import production_completed

        transaction.on_commit(
            lambda: production_completed.send(
                sender=self.__class__,
                order=self,
                actual_quantity=self.actual_quantity,
                user=user,
            )
        )

    def cancel(self, reason: str = "", user=None):
        """Cancela ordem de produção."""
        self._require_status(
            ProductionOrderStatus.PENDING, ProductionOrderStatus.IN_PROGRESS
        )

        self.status = ProductionOrderStatus.CANCELLED
        if reason:
            self.notes = f"{self.notes}\n[CANCELADA] {reason}".strip()
        self.save(update_fields=["status", "notes", "updated_at"])

        logger.info(f"ProductionOrder {self.code} cancelled: {reason}")

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def is_open(self) -> bool:
        return self.status in (
            ProductionOrderStatus.PENDING,
            ProductionOrderStatus.IN_PROGRESS,
        )

    @property
    def loss_quantity(self) -> Decimal | None:
        """Planned minus actual, once completed."""
        if self.actual_quantity is not None:
            return self.planned_quantity - self.actual_quantity
        return None


class KitStatus(models.TextChoices):
    PENDING = "pending", _("Pendente")
    ASSEMBLED = "assembled", _("Montado")


class Kit(models.Model):
    """
    Kit de pré-pesagem de uma ordem de produção.

    Items são as matérias-primas totais da receita da ordem,
    com sub-receitas expandidas.
    """

    order = models.OneToOneField(
        ProductionOrder,
        on_delete=models.CASCADE,
        related_name="kit",
        verbose_name=_("Ordem de Produção"),
    )
    status = models.CharField(
        max_length=20,
        choices=KitStatus.choices,
        default=KitStatus.PENDING,
        verbose_name=_("Status"),
    )
    assembled_at = models.DateTimeField(null=True, blank=True, verbose_name=_("Montado em"))
    assembled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name=_("Montado por"),
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Criado em"))

    class Meta:
        db_table = "padaria_kit"
        verbose_name = _("Kit")
        verbose_name_plural = _("Kits")
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"Kit {self.order.code}"

    def assemble(self, user=None):
        """Marca o kit como montado (pesado e separado)."""
        if self.status != KitStatus.PENDING:
            raise ValidationFailed(
                "INVALID_STATUS",
                "Kit já foi montado.",
                current=self.status,
                expected=[str(KitStatus.PENDING)],
            )

        self.status = KitStatus.ASSEMBLED
        self.assembled_at = timezone.now()
        self.assembled_by = user if getattr(user, "pk", None) else None
        self.save(update_fields=["status", "assembled_at", "assembled_by"])

        logger.info(
            f"Kit for {self.order.code} assembled",
            extra={"kit": self.pk, "order": self.order_id, "user": _username(user)},
        )


class KitItem(models.Model):
    kit = models.ForeignKey(
        Kit,
        on_delete=models.CASCADE,
        related_name="items",
        verbose_name=_("Kit"),
    )
    raw_material = models.ForeignKey(
        "padaria.RawMaterial",
        on_delete=models.PROTECT,
        related_name="kit_items",
        verbose_name=_("Matéria-prima"),
    )
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_("Quantidade"),
    )

    class Meta:
        db_table = "padaria_kit_item"
        verbose_name = _("Item do Kit")
        verbose_name_plural = _("Itens do Kit")
        ordering = ["kit", "raw_material__name"]
        unique_together = [["kit", "raw_material"]]

    def __str__(self) -> str:
        return f"{self.raw_material.name}: {self.quantity} {self.raw_material.unit}"


def _username(user) -> str | None:
    return getattr(user, "email", None) if user else None
