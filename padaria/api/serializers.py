"""
Padaria API Serializers.

Wire names are Portuguese (nome, rendimento, ...); model attributes are not.
"""

from decimal import Decimal

from rest_framework import serializers

from padaria.composition import (
    RAW_MATERIAL,
    SUB_RECIPE,
    RecipeDraft,
    parse_ingredient,
)
from padaria.models import (
    IngredientLine,
    Kit,
    KitItem,
    ProductionOrder,
    RawMaterial,
    Recipe,
)


class UserSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    nome = serializers.CharField(source="name", read_only=True)
    email = serializers.EmailField(read_only=True)
    perfil = serializers.CharField(source="role", read_only=True)


class RawMaterialSerializer(serializers.ModelSerializer):
    """Serializer for RawMaterial model."""

    nome = serializers.CharField(source="name")
    unidade_medida = serializers.CharField(source="unit")
    criado_em = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = RawMaterial
        fields = ["id", "nome", "unidade_medida", "criado_em"]


class RecipeSerializer(serializers.ModelSerializer):
    """Recipe header (no ingredient lines)."""

    nome = serializers.CharField(source="name")
    rendimento = serializers.DecimalField(
        source="yield_quantity", max_digits=10, decimal_places=3
    )
    unidade_rendimento = serializers.CharField(source="yield_unit")
    eh_sub_receita = serializers.BooleanField(source="is_sub_recipe")

    class Meta:
        model = Recipe
        fields = ["id", "nome", "rendimento", "unidade_rendimento", "eh_sub_receita"]


class IngredientLineSerializer(serializers.ModelSerializer):
    tipo = serializers.SerializerMethodField()
    id = serializers.SerializerMethodField()
    nome = serializers.SerializerMethodField()
    unidade = serializers.SerializerMethodField()
    quantidade = serializers.DecimalField(
        source="quantity", max_digits=10, decimal_places=3
    )

    class Meta:
        model = IngredientLine
        fields = ["tipo", "id", "nome", "quantidade", "unidade"]

    def get_tipo(self, obj) -> str:
        return obj.target.kind

    def get_id(self, obj) -> int:
        return obj.target.id

    def get_nome(self, obj) -> str:
        if obj.raw_material_id is not None:
            return obj.raw_material.name
        return obj.sub_recipe.name

    def get_unidade(self, obj) -> str:
        if obj.raw_material_id is not None:
            return obj.raw_material.unit
        return obj.sub_recipe.yield_unit


class RecipeDetailSerializer(RecipeSerializer):
    ingredientes = IngredientLineSerializer(source="ingredients", many=True, read_only=True)

    class Meta(RecipeSerializer.Meta):
        fields = RecipeSerializer.Meta.fields + ["ingredientes"]


class IngredientInputSerializer(serializers.Serializer):
    """Serializer for one ingredient of a recipe being created."""

    tipo = serializers.ChoiceField(choices=[RAW_MATERIAL, SUB_RECIPE])
    id = serializers.IntegerField(min_value=1)
    quantidade = serializers.DecimalField(
        max_digits=10, decimal_places=3, min_value=Decimal("0.001")
    )


class RecipeCreateSerializer(serializers.Serializer):
    """
    Serializer for the recipe creation payload.

    {
        "nome": "Pão Francês",
        "rendimento": 10,
        "unidade_rendimento": "kg",
        "eh_sub_receita": false,
        "ingredientes": [{"tipo": "materia_prima", "id": 1, "quantidade": 2.5}]
    }
    """

    nome = serializers.CharField()
    rendimento = serializers.DecimalField(
        max_digits=10, decimal_places=3, min_value=Decimal("0.001")
    )
    unidade_rendimento = serializers.CharField(max_length=20)
    eh_sub_receita = serializers.BooleanField(default=False)
    ingredientes = IngredientInputSerializer(many=True)

    def to_draft(self) -> RecipeDraft:
        data = self.validated_data
        return RecipeDraft(
            name=data["nome"],
            yield_quantity=data["rendimento"],
            yield_unit=data["unidade_rendimento"],
            is_sub_recipe=data["eh_sub_receita"],
            lines=[parse_ingredient(item) for item in data["ingredientes"]],
        )


class ProductionOrderSerializer(serializers.ModelSerializer):
    """Serializer for ProductionOrder model."""

    codigo = serializers.CharField(source="code", read_only=True)
    receita = serializers.PrimaryKeyRelatedField(
        source="recipe", queryset=Recipe.objects.all()
    )
    receita_nome = serializers.CharField(source="recipe.name", read_only=True)
    quantidade_planejada = serializers.DecimalField(
        source="planned_quantity",
        max_digits=10,
        decimal_places=3,
        min_value=Decimal("0.001"),
    )
    quantidade_real = serializers.DecimalField(
        source="actual_quantity", max_digits=10, decimal_places=3, read_only=True
    )
    iniciada_em = serializers.DateTimeField(source="started_at", read_only=True)
    concluida_em = serializers.DateTimeField(source="completed_at", read_only=True)
    observacoes = serializers.CharField(source="notes", required=False, allow_blank=True)
    criado_em = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = ProductionOrder
        fields = [
            "id",
            "codigo",
            "receita",
            "receita_nome",
            "quantidade_planejada",
            "quantidade_real",
            "status",
            "iniciada_em",
            "concluida_em",
            "observacoes",
            "criado_em",
        ]
        read_only_fields = ["status"]


class ProductionOrderCompleteSerializer(serializers.Serializer):
    quantidade_real = serializers.DecimalField(
        max_digits=10,
        decimal_places=3,
        min_value=Decimal("0"),
        required=False,
        help_text="Quantidade real (opcional, padrão = planejada)",
    )


class KitItemSerializer(serializers.ModelSerializer):
    materia_prima = serializers.IntegerField(source="raw_material_id", read_only=True)
    nome = serializers.CharField(source="raw_material.name", read_only=True)
    unidade = serializers.CharField(source="raw_material.unit", read_only=True)
    quantidade = serializers.DecimalField(
        source="quantity", max_digits=12, decimal_places=3, read_only=True
    )

    class Meta:
        model = KitItem
        fields = ["materia_prima", "nome", "unidade", "quantidade"]


class KitSerializer(serializers.ModelSerializer):
    ordem = serializers.IntegerField(source="order_id", read_only=True)
    ordem_codigo = serializers.CharField(source="order.code", read_only=True)
    montado_em = serializers.DateTimeField(source="assembled_at", read_only=True)
    itens = KitItemSerializer(source="items", many=True, read_only=True)

    class Meta:
        model = Kit
        fields = ["id", "ordem", "ordem_codigo", "status", "montado_em", "itens"]
