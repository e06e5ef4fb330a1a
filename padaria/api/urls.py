"""
Padaria API URLs.

Include this in your project's urlpatterns:

    path('api/', include('padaria.api.urls')),
"""

from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import (
    KitViewSet,
    LoginView,
    ProductionOrderViewSet,
    RawMaterialViewSet,
    RecipeViewSet,
    RegisterView,
)

router = DefaultRouter()
router.register("materias-primas", RawMaterialViewSet, basename="materia-prima")
router.register("receitas", RecipeViewSet, basename="receita")
router.register("ordens-producao", ProductionOrderViewSet, basename="ordem-producao")
router.register("kits", KitViewSet, basename="kit")

urlpatterns = [
    path("auth/register/", RegisterView.as_view(), name="auth-register"),
    path("auth/login/", LoginView.as_view(), name="auth-login"),
] + router.urls
