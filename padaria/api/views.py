"""
Padaria API Views.
"""

import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from padaria.exceptions import PadariaError
from padaria.models import Kit, ProductionOrder, Role
from padaria.services import accounts
from padaria.services.catalog import catalog
from padaria.services.kits import build_kit

from .permissions import HasRole
from .serializers import (
    IngredientLineSerializer,
    KitSerializer,
    ProductionOrderCompleteSerializer,
    ProductionOrderSerializer,
    RawMaterialSerializer,
    RecipeCreateSerializer,
    RecipeDetailSerializer,
    RecipeSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


def error_response(exc: PadariaError) -> Response:
    """Stable classification + message; never the internal error payload."""
    if exc.status_code >= 500:
        logger.error(f"Request failed: {exc}", extra={"code": exc.code})
    return Response(exc.as_dict(), status=exc.status_code)


def invalid_response(errors) -> Response:
    return Response(
        {"code": "VALIDATION_ERROR", "message": "Dados inválidos.", "fields": errors},
        status=status.HTTP_400_BAD_REQUEST,
    )


class RoleMixin:
    """
    Per-action role requirements.

    Actions missing from ``action_roles`` only require authentication.
    """

    action_roles: dict = {}

    def get_permissions(self):
        roles = self.action_roles.get(self.action)
        if roles:
            return [IsAuthenticated(), HasRole(*roles)]
        return [IsAuthenticated()]


# ══════════════════════════════════════════════════════════════
# AUTH
# ══════════════════════════════════════════════════════════════


class RegisterView(APIView):
    """
    POST /api/auth/register/
    {"nome": "...", "email": "...", "senha": "...", "perfil": "PRODUCAO"}
    """

    permission_classes = [AllowAny]

    def post(self, request):
        creator = request.user if request.user.is_authenticated else None
        try:
            user = accounts.register_user(
                request.data.get("nome"),
                request.data.get("email"),
                request.data.get("senha"),
                request.data.get("perfil"),
                creator=creator,
            )
        except PadariaError as e:
            return error_response(e)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/auth/login/
    {"email": "...", "senha": "..."}
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        try:
            token, user = accounts.login(
                request.data.get("email"), request.data.get("senha")
            )
        except PadariaError as e:
            return error_response(e)
        return Response(
            {
                "message": "Login bem-sucedido!",
                "token": token,
                "user": {"id": user.pk, "nome": user.name, "perfil": user.role},
            }
        )


# ══════════════════════════════════════════════════════════════
# CATALOG
# ══════════════════════════════════════════════════════════════


class RawMaterialViewSet(RoleMixin, viewsets.ViewSet):
    """
    list: All raw materials ordered by name
    create: New raw material (ADMIN)
    """

    action_roles = {"create": (Role.ADMIN,)}

    def list(self, request):
        try:
            materials = catalog.list_raw_materials()
        except PadariaError as e:
            return error_response(e)
        return Response(RawMaterialSerializer(materials, many=True).data)

    def create(self, request):
        """
        POST /api/materias-primas/
        {"nome": "Farinha", "unidade_medida": "kg"}
        """
        name = request.data.get("nome", request.data.get("name"))
        try:
            material = catalog.create_raw_material(
                name, request.data.get("unidade_medida"), role=request.user.role
            )
        except PadariaError as e:
            return error_response(e)
        return Response(
            RawMaterialSerializer(material).data, status=status.HTTP_201_CREATED
        )


class RecipeViewSet(RoleMixin, viewsets.ViewSet):
    """
    list: Recipe headers ordered by name
    retrieve: One recipe with its ingredient lines
    create: New recipe with ingredient lines, all-or-nothing (ADMIN)
    """

    action_roles = {"create": (Role.ADMIN,)}

    def list(self, request):
        try:
            recipes = catalog.list_recipes()
        except PadariaError as e:
            return error_response(e)
        return Response(RecipeSerializer(recipes, many=True).data)

    def retrieve(self, request, pk=None):
        try:
            recipe = catalog.get_recipe(int(pk))
        except ValueError:
            return Response(
                {"code": "RECIPE_NOT_FOUND", "message": "Registro não encontrado."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except PadariaError as e:
            return error_response(e)
        return Response(RecipeDetailSerializer(recipe).data)

    def create(self, request):
        """
        POST /api/receitas/
        {
            "nome": "Pão Francês",
            "rendimento": 10,
            "unidade_rendimento": "kg",
            "eh_sub_receita": false,
            "ingredientes": [
                {"tipo": "materia_prima", "id": 1, "quantidade": 2.5},
                {"tipo": "sub_receita", "id": 7, "quantidade": 1.0}
            ]
        }
        """
        serializer = RecipeCreateSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning(f"Recipe payload rejected: {serializer.errors}")
            return invalid_response(serializer.errors)

        try:
            result = catalog.create_recipe(
                serializer.to_draft(), role=request.user.role, user=request.user
            )
        except PadariaError as e:
            return error_response(e)
        return Response({"receitaId": result.recipe_id}, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"])
    def ingredientes(self, request, pk=None):
        """GET /api/receitas/{pk}/ingredientes/"""
        try:
            recipe = catalog.get_recipe(int(pk))
        except ValueError:
            return Response(
                {"code": "RECIPE_NOT_FOUND", "message": "Registro não encontrado."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except PadariaError as e:
            return error_response(e)
        return Response(
            IngredientLineSerializer(recipe.ingredients.all(), many=True).data
        )


# ══════════════════════════════════════════════════════════════
# PRODUCTION
# ══════════════════════════════════════════════════════════════


class ProductionOrderViewSet(
    RoleMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    list: All production orders
    create: New production order (ADMIN)
    iniciar / concluir / cancelar: Status transitions (ADMIN, PRODUCAO)
    kit: Build the pre-weighing kit (ADMIN, PRE_PESAGEM)
    """

    queryset = ProductionOrder.objects.select_related("recipe")
    serializer_class = ProductionOrderSerializer
    action_roles = {
        "create": (Role.ADMIN,),
        "iniciar": (Role.ADMIN, Role.PRODUCAO),
        "concluir": (Role.ADMIN, Role.PRODUCAO),
        "cancelar": (Role.ADMIN, Role.PRODUCAO),
        "kit": (Role.ADMIN, Role.PRE_PESAGEM),
    }

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    @action(detail=True, methods=["post"])
    def iniciar(self, request, pk=None):
        """POST /api/ordens-producao/{pk}/iniciar/"""
        order = self.get_object()
        try:
            order.start(user=request.user)
        except PadariaError as e:
            return error_response(e)
        return Response(self.get_serializer(order).data)

    @action(detail=True, methods=["post"])
    def concluir(self, request, pk=None):
        """
        POST /api/ordens-producao/{pk}/concluir/
        {"quantidade_real": 9.5}  // optional
        """
        order = self.get_object()
        serializer = ProductionOrderCompleteSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_response(serializer.errors)

        try:
            order.complete(
                actual_quantity=serializer.validated_data.get("quantidade_real"),
                user=request.user,
            )
        except PadariaError as e:
            return error_response(e)
        return Response(self.get_serializer(order).data)

    @action(detail=True, methods=["post"])
    def cancelar(self, request, pk=None):
        """
        POST /api/ordens-producao/{pk}/cancelar/
        {"motivo": "Pedido cancelado"}  // optional
        """
        order = self.get_object()
        try:
            order.cancel(reason=request.data.get("motivo", ""), user=request.user)
        except PadariaError as e:
            return error_response(e)
        return Response(self.get_serializer(order).data)

    @action(detail=True, methods=["post"])
    def kit(self, request, pk=None):
        """POST /api/ordens-producao/{pk}/kit/"""
        order = self.get_object()
        try:
            kit = build_kit(order, user=request.user)
        except PadariaError as e:
            return error_response(e)
        return Response(KitSerializer(kit).data, status=status.HTTP_201_CREATED)


class KitViewSet(RoleMixin, viewsets.ReadOnlyModelViewSet):
    """
    list / retrieve: Kits with their items
    montar: Mark kit as assembled (ADMIN, PRE_PESAGEM)
    """

    queryset = Kit.objects.select_related("order").prefetch_related("items__raw_material")
    serializer_class = KitSerializer
    action_roles = {"montar": (Role.ADMIN, Role.PRE_PESAGEM)}

    @action(detail=True, methods=["post"])
    def montar(self, request, pk=None):
        """POST /api/kits/{pk}/montar/"""
        kit = self.get_object()
        try:
            kit.assemble(user=request.user)
        except PadariaError as e:
            return error_response(e)
        return Response(self.get_serializer(kit).data)
