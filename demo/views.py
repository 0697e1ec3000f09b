from django.http import Http404
from django.shortcuts import render
from django.template import TemplateDoesNotExist
from django.views.decorators.http import require_GET


@require_GET
def home(request):
    return render(request, "demo/home.html")


@require_GET
def render_template(request, template):
    """Render ``demo/<template>.html`` as a full page."""
    try:
        return render(request, f"demo/{template}.html")
    except TemplateDoesNotExist:
        raise Http404(f"No template named {template!r}")
