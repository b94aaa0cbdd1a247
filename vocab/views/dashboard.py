"""Dashboard view."""

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from ..stats import dashboard_stats


@login_required
@require_GET
def dashboard(request):
    """Progress overview, due forecast and recent activity."""
    return JsonResponse(dashboard_stats(request.user))
