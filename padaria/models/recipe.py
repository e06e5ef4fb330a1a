"""
Recipe and IngredientLine models.

Recipe = BOM (Bill of Materials) - defines HOW to make something.
IngredientLine = one row of the BOM, pointing at exactly one raw material
or one sub-recipe.

Referência: http://techno.boulangerie.free.fr/
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from padaria.composition import (
    IngredientLineDraft,
    IngredientTarget,
    RawMaterialTarget,
    SubRecipeTarget,
)


class Recipe(models.Model):
    """
    Receita de produção (BOM - Bill of Materials).

    Define:
    - Nome único
    - Rendimento (quantidade + unidade) de uma execução da receita
    - Se pode ser usada como sub-receita em outras receitas
    """

    name = models.CharField(
        max_length=200,
        unique=True,
        verbose_name=_("Nome"),
        help_text=_("Nome legível da receita"),
    )

    yield_quantity = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        verbose_name=_("Rendimento"),
        help_text=_("Quantidade produzida por execução da receita"),
    )
    yield_unit = models.CharField(
        max_length=20,
        verbose_name=_("Unidade de Rendimento"),
        help_text=_("kg, L, un..."),
    )

    is_sub_recipe = models.BooleanField(
        default=False,
        verbose_name=_("É Sub-receita"),
        help_text=_("Pode ser usada como ingrediente de outras receitas"),
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("criado em"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("atualizado em"))

    # History
    history = HistoricalRecords()

    class Meta:
        db_table = "padaria_receita"
        verbose_name = _("Receita")
        verbose_name_plural = _("Receitas")
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(yield_quantity__gt=0),
                name="receita_rendimento_positivo",
            ),
        ]

    def clean(self):
        super().clean()
        if self.yield_quantity is not None and self.yield_quantity <= 0:
            raise ValidationError({
                "yield_quantity": _("Deve ser maior que zero.")
            })

    def save(self, *args, **kwargs):
        self.full_clean(validate_unique=False, validate_constraints=False)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} ({self.yield_quantity} {self.yield_unit})"


class IngredientLine(models.Model):
    """
    Ingrediente de uma receita.

    Aponta para exatamente UM alvo: matéria-prima OU sub-receita.
    A quantidade está na unidade do alvo (unidade da matéria-prima ou
    unidade de rendimento da sub-receita).
    """

    recipe = models.ForeignKey(
        Recipe,
        on_delete=models.CASCADE,
        related_name="ingredients",
        verbose_name=_("Receita"),
    )

    position = models.PositiveSmallIntegerField(
        default=0,
        verbose_name=_("Ordem"),
    )

    raw_material = models.ForeignKey(
        "padaria.RawMaterial",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="ingredient_lines",
        verbose_name=_("Matéria-prima"),
    )
    sub_recipe = models.ForeignKey(
        Recipe,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="used_in",
        verbose_name=_("Sub-receita"),
    )

    quantity = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        verbose_name=_("Quantidade"),
    )

    class Meta:
        db_table = "padaria_ingrediente_receita"
        verbose_name = _("Ingrediente")
        verbose_name_plural = _("Ingredientes")
        ordering = ["recipe", "position", "id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(raw_material__isnull=False, sub_recipe__isnull=True)
                    | Q(raw_material__isnull=True, sub_recipe__isnull=False)
                ),
                name="ingrediente_alvo_exclusivo",
            ),
            models.CheckConstraint(
                condition=~Q(sub_recipe=F("recipe")),
                name="ingrediente_sem_auto_referencia",
            ),
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="ingrediente_quantidade_positiva",
            ),
        ]
        indexes = [
            models.Index(fields=["recipe", "position"], name="ingrediente_receita_pos_idx"),
        ]

    @classmethod
    def from_draft(cls, recipe: Recipe, position: int, draft: IngredientLineDraft):
        """Map a tagged target onto the two nullable columns."""
        line = cls(recipe=recipe, position=position, quantity=draft.quantity)
        if isinstance(draft.target, RawMaterialTarget):
            line.raw_material_id = draft.target.id
        elif isinstance(draft.target, SubRecipeTarget):
            line.sub_recipe_id = draft.target.id
        else:
            raise TypeError(f"Unknown ingredient target: {draft.target!r}")
        return line

    @property
    def target(self) -> IngredientTarget:
        if self.raw_material_id is not None:
            return RawMaterialTarget(self.raw_material_id)
        return SubRecipeTarget(self.sub_recipe_id)

    def clean(self):
        super().clean()
        if (self.raw_material_id is None) == (self.sub_recipe_id is None):
            raise ValidationError(
                _("Ingrediente deve apontar para uma matéria-prima ou uma sub-receita.")
            )
        if self.quantity is not None and self.quantity <= Decimal("0"):
            raise ValidationError({"quantity": _("Deve ser maior que zero.")})

    def save(self, *args, **kwargs):
        self.full_clean(validate_unique=False, validate_constraints=False)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        target = self.raw_material if self.raw_material_id else self.sub_recipe
        return f"{target} x {self.quantity}"
