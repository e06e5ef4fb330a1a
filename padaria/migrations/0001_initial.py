# Generated manually: users, catalog (raw materials, recipes, ingredient lines),
# production orders and pre-weighing kits.

import django.db.models.deletion
import django.utils.timezone
import simple_history.models
from django.conf import settings
from django.db import migrations, models

import padaria.models.user


def history_fields():
    return [
        ("history_id", models.AutoField(primary_key=True, serialize=False)),
        ("history_date", models.DateTimeField(db_index=True)),
        ("history_change_reason", models.CharField(max_length=100, null=True)),
        (
            "history_type",
            models.CharField(
                choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")],
                max_length=1,
            ),
        ),
    ]


HISTORY_OPTIONS = {
    "ordering": ("-history_date", "-history_id"),
    "get_latest_by": ("history_date", "history_id"),
}

ORDER_STATUS_CHOICES = [
    ("pending", "Pendente"),
    ("in_progress", "Em Produção"),
    ("completed", "Concluída"),
    ("cancelled", "Cancelada"),
]


def history_user():
    return (
        "history_user",
        models.ForeignKey(
            null=True,
            on_delete=django.db.models.deletion.SET_NULL,
            related_name="+",
            to=settings.AUTH_USER_MODEL,
        ),
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                (
                    "last_login",
                    models.DateTimeField(
                        blank=True, null=True, verbose_name="last login"
                    ),
                ),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                (
                    "is_staff",
                    models.BooleanField(
                        default=False,
                        help_text="Designates whether the user can log into this admin site.",
                        verbose_name="staff status",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.",
                        verbose_name="active",
                    ),
                ),
                (
                    "date_joined",
                    models.DateTimeField(
                        default=django.utils.timezone.now, verbose_name="date joined"
                    ),
                ),
                ("name", models.CharField(max_length=150, verbose_name="Nome")),
                (
                    "email",
                    models.EmailField(max_length=254, unique=True, verbose_name="E-mail"),
                ),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("ADMIN", "Administrador"),
                            ("PRODUCAO", "Produção"),
                            ("PRE_PESAGEM", "Pré-pesagem"),
                            ("CONSULTA", "Consulta"),
                        ],
                        default="CONSULTA",
                        max_length=20,
                        verbose_name="Perfil",
                    ),
                ),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "verbose_name": "Usuário",
                "verbose_name_plural": "Usuários",
                "db_table": "padaria_usuario",
                "ordering": ["name"],
            },
            managers=[
                ("objects", padaria.models.user.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="RawMaterial",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "name",
                    models.CharField(max_length=150, unique=True, verbose_name="Nome"),
                ),
                (
                    "unit",
                    models.CharField(
                        help_text="kg, g, L, un...",
                        max_length=20,
                        verbose_name="Unidade de Medida",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, verbose_name="criado em"),
                ),
            ],
            options={
                "verbose_name": "Matéria-prima",
                "verbose_name_plural": "Matérias-primas",
                "db_table": "padaria_materia_prima",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Recipe",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        help_text="Nome legível da receita",
                        max_length=200,
                        unique=True,
                        verbose_name="Nome",
                    ),
                ),
                (
                    "yield_quantity",
                    models.DecimalField(
                        decimal_places=3,
                        help_text="Quantidade produzida por execução da receita",
                        max_digits=10,
                        verbose_name="Rendimento",
                    ),
                ),
                (
                    "yield_unit",
                    models.CharField(
                        help_text="kg, L, un...",
                        max_length=20,
                        verbose_name="Unidade de Rendimento",
                    ),
                ),
                (
                    "is_sub_recipe",
                    models.BooleanField(
                        default=False,
                        help_text="Pode ser usada como ingrediente de outras receitas",
                        verbose_name="É Sub-receita",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, verbose_name="criado em"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="atualizado em"),
                ),
            ],
            options={
                "verbose_name": "Receita",
                "verbose_name_plural": "Receitas",
                "db_table": "padaria_receita",
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("yield_quantity__gt", 0)),
                        name="receita_rendimento_positivo",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="IngredientLine",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "position",
                    models.PositiveSmallIntegerField(default=0, verbose_name="Ordem"),
                ),
                (
                    "quantity",
                    models.DecimalField(
                        decimal_places=3, max_digits=10, verbose_name="Quantidade"
                    ),
                ),
                (
                    "recipe",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ingredients",
                        to="padaria.recipe",
                        verbose_name="Receita",
                    ),
                ),
                (
                    "raw_material",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ingredient_lines",
                        to="padaria.rawmaterial",
                        verbose_name="Matéria-prima",
                    ),
                ),
                (
                    "sub_recipe",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="used_in",
                        to="padaria.recipe",
                        verbose_name="Sub-receita",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ingrediente",
                "verbose_name_plural": "Ingredientes",
                "db_table": "padaria_ingrediente_receita",
                "ordering": ["recipe", "position", "id"],
                "indexes": [
                    models.Index(
                        fields=["recipe", "position"],
                        name="ingrediente_receita_pos_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ("raw_material__isnull", False),
                                ("sub_recipe__isnull", True),
                            ),
                            models.Q(
                                ("raw_material__isnull", True),
                                ("sub_recipe__isnull", False),
                            ),
                            _connector="OR",
                        ),
                        name="ingrediente_alvo_exclusivo",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("sub_recipe", models.F("recipe")), _negated=True
                        ),
                        name="ingrediente_sem_auto_referencia",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="ingrediente_quantidade_positiva",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CodeSequence",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "prefix",
                    models.CharField(max_length=50, unique=True, verbose_name="Prefixo"),
                ),
                (
                    "last_value",
                    models.PositiveIntegerField(default=0, verbose_name="Último valor"),
                ),
            ],
            options={
                "verbose_name": "Sequência de Código",
                "verbose_name_plural": "Sequências de Código",
                "db_table": "padaria_sequencia_codigo",
            },
        ),
        migrations.CreateModel(
            name="ProductionOrder",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        blank=True,
                        help_text="Identificador único (auto-gerado se vazio)",
                        max_length=50,
                        unique=True,
                        verbose_name="Código",
                    ),
                ),
                (
                    "planned_quantity",
                    models.DecimalField(
                        decimal_places=3,
                        help_text="Quantidade planejada, na unidade de rendimento da receita",
                        max_digits=10,
                        verbose_name="Planejado",
                    ),
                ),
                (
                    "actual_quantity",
                    models.DecimalField(
                        blank=True,
                        decimal_places=3,
                        max_digits=10,
                        null=True,
                        verbose_name="Quantidade Real",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=ORDER_STATUS_CHOICES,
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "started_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="Início Real"),
                ),
                (
                    "completed_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="Fim Real"),
                ),
                ("notes", models.TextField(blank=True, verbose_name="Observações")),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, verbose_name="Criado em"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="Atualizado em"),
                ),
                (
                    "recipe",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="production_orders",
                        to="padaria.recipe",
                        verbose_name="Receita",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="production_orders",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Criado por",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ordem de Produção",
                "verbose_name_plural": "Ordens de Produção",
                "db_table": "padaria_ordem_producao",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["recipe", "status"],
                        name="ordem_receita_status_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("planned_quantity__gt", 0)),
                        name="ordem_quantidade_positiva",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Kit",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pendente"), ("assembled", "Montado")],
                        default="pending",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "assembled_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="Montado em"),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, verbose_name="Criado em"),
                ),
                (
                    "order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="kit",
                        to="padaria.productionorder",
                        verbose_name="Ordem de Produção",
                    ),
                ),
                (
                    "assembled_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Montado por",
                    ),
                ),
            ],
            options={
                "verbose_name": "Kit",
                "verbose_name_plural": "Kits",
                "db_table": "padaria_kit",
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="KitItem",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "quantity",
                    models.DecimalField(
                        decimal_places=3, max_digits=12, verbose_name="Quantidade"
                    ),
                ),
                (
                    "kit",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="padaria.kit",
                        verbose_name="Kit",
                    ),
                ),
                (
                    "raw_material",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="kit_items",
                        to="padaria.rawmaterial",
                        verbose_name="Matéria-prima",
                    ),
                ),
            ],
            options={
                "verbose_name": "Item do Kit",
                "verbose_name_plural": "Itens do Kit",
                "db_table": "padaria_kit_item",
                "ordering": ["kit", "raw_material__name"],
                "unique_together": {("kit", "raw_material")},
            },
        ),
        migrations.CreateModel(
            name="HistoricalRecipe",
            fields=[
                (
                    "id",
                    models.BigIntegerField(
                        auto_created=True, blank=True, db_index=True, verbose_name="ID"
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        db_index=True,
                        help_text="Nome legível da receita",
                        max_length=200,
                        verbose_name="Nome",
                    ),
                ),
                (
                    "yield_quantity",
                    models.DecimalField(
                        decimal_places=3,
                        help_text="Quantidade produzida por execução da receita",
                        max_digits=10,
                        verbose_name="Rendimento",
                    ),
                ),
                (
                    "yield_unit",
                    models.CharField(
                        help_text="kg, L, un...",
                        max_length=20,
                        verbose_name="Unidade de Rendimento",
                    ),
                ),
                (
                    "is_sub_recipe",
                    models.BooleanField(
                        default=False,
                        help_text="Pode ser usada como ingrediente de outras receitas",
                        verbose_name="É Sub-receita",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        blank=True, editable=False, verbose_name="criado em"
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        blank=True, editable=False, verbose_name="atualizado em"
                    ),
                ),
                *history_fields(),
                history_user(),
            ],
            options={
                "verbose_name": "historical Receita",
                "verbose_name_plural": "historical Receitas",
                **HISTORY_OPTIONS,
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="HistoricalProductionOrder",
            fields=[
                (
                    "id",
                    models.BigIntegerField(
                        auto_created=True, blank=True, db_index=True, verbose_name="ID"
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Identificador único (auto-gerado se vazio)",
                        max_length=50,
                        verbose_name="Código",
                    ),
                ),
                (
                    "planned_quantity",
                    models.DecimalField(
                        decimal_places=3,
                        help_text="Quantidade planejada, na unidade de rendimento da receita",
                        max_digits=10,
                        verbose_name="Planejado",
                    ),
                ),
                (
                    "actual_quantity",
                    models.DecimalField(
                        blank=True,
                        decimal_places=3,
                        max_digits=10,
                        null=True,
                        verbose_name="Quantidade Real",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=ORDER_STATUS_CHOICES,
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "started_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="Início Real"),
                ),
                (
                    "completed_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="Fim Real"),
                ),
                ("notes", models.TextField(blank=True, verbose_name="Observações")),
                (
                    "created_at",
                    models.DateTimeField(
                        blank=True, editable=False, verbose_name="Criado em"
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        blank=True, editable=False, verbose_name="Atualizado em"
                    ),
                ),
                *history_fields(),
                (
                    "recipe",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="padaria.recipe",
                        verbose_name="Receita",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Criado por",
                    ),
                ),
                history_user(),
            ],
            options={
                "verbose_name": "historical Ordem de Produção",
                "verbose_name_plural": "historical Ordens de Produção",
                **HISTORY_OPTIONS,
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
