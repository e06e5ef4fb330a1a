"""
Per-prefix counter used to number production orders (OP-2026-00001...).
"""

from django.db import models, transaction
from django.utils.translation import gettext_lazy as _


class CodeSequence(models.Model):
    """
    Contador atômico por prefixo.

    Uma linha por prefixo, ex.: "OP-2026" → last_value = 42.
    Incremento protegido por SELECT FOR UPDATE.
    """

    prefix = models.CharField(
        max_length=50,
        unique=True,
        verbose_name=_("Prefixo"),
    )
    last_value = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Último valor"),
    )

    class Meta:
        db_table = "padaria_sequencia_codigo"
        verbose_name = _("Sequência de Código")
        verbose_name_plural = _("Sequências de Código")

    def __str__(self) -> str:
        return f"{self.prefix} → {self.last_value}"

    @classmethod
    def next_value(cls, prefix: str, using: str | None = None) -> int:
        """Increment and return the counter for ``prefix`` (1, 2, 3...)."""
        with transaction.atomic(using=using):
            seq, _created = (
                cls.objects.db_manager(using)
                .select_for_update()
                .get_or_create(prefix=prefix, defaults={"last_value": 0})
            )
            seq.last_value += 1
            seq.save(update_fields=["last_value"])
            return seq.last_value
