"""
Padaria URL Configuration.
"""

from django.urls import include, path

from padaria.views import index

urlpatterns = [
    path("", index, name="index"),
    path("api/", include("padaria.api.urls")),
]
