"""
Padaria Views.
"""

from django.http import HttpResponse


def index(request):
    """Liveness message."""
    return HttpResponse("Backend da padaria com autenticação está no ar!")
