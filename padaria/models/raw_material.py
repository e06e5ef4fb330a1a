"""
RawMaterial model.

Terminal (non-composable) ingredient with a unit of measure.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class RawMaterial(models.Model):
    """
    Matéria-prima.

    Exemplos: Farinha de Trigo (kg), Água (L), Fermento (kg)...
    """

    name = models.CharField(
        max_length=150,
        unique=True,
        verbose_name=_("Nome"),
    )
    unit = models.CharField(
        max_length=20,
        verbose_name=_("Unidade de Medida"),
        help_text=_("kg, g, L, un..."),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("criado em"))

    class Meta:
        db_table = "padaria_materia_prima"
        verbose_name = _("Matéria-prima")
        verbose_name_plural = _("Matérias-primas")
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.unit})"
