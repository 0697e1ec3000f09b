"""
Live component endpoints.

    GET  /_components/<name>            re-render from dehydrated state
    POST /_components/<name>/<action>   run an action, then re-render

Both answer with the component HTML, or with ``{"html": ..., "data": ...}``
when the client accepts the live-component JSON media type.
"""

import inspect
import json
import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpResponse, HttpResponseBadRequest, JsonResponse, QueryDict
from django.http.response import HttpResponseBase, HttpResponseRedirectBase
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from . import csrf
from .component import PRE_RERENDER
from .exceptions import ActionNotFound, HydrationError
from .factory import factory
from .hydrator import denormalize, hydrator
from .signals import component_action_performed, component_pre_rerender

logger = logging.getLogger(__name__)

DEFAULT_JSON_MEDIA_TYPE = "application/vnd.live-component+json"
ARGS_KEY = "args"


def json_media_type() -> str:
    return getattr(settings, "LIVE_COMPONENT_JSON_MEDIA_TYPE", DEFAULT_JSON_MEDIA_TYPE)


def _accepted_types(request) -> set[str]:
    """Media types listed in the Accept header, wildcards included verbatim."""
    header = request.headers.get("Accept", "")
    return {
        part.split(";")[0].strip().lower()
        for part in header.split(",")
        if part.strip()
    }


def _request_data(request) -> tuple[dict, dict]:
    """Return ``(state, action_args)`` carried by ``request``.

    State comes from the query string; a JSON body on POST is merged over
    it. Action args live under the ``args`` key, either as an url-encoded
    string in the query or as an object in the JSON body.
    """
    data = {key: request.GET.get(key) for key in request.GET}
    args = dict(QueryDict(data.pop(ARGS_KEY, "") or "").items())

    if request.method == "POST" and request.content_type == "application/json" and request.body:
        try:
            body = json.loads(request.body)
        except ValueError as exc:
            raise HydrationError("Malformed JSON body") from exc
        if not isinstance(body, dict):
            raise HydrationError("JSON body must be an object")
        body_args = body.pop(ARGS_KEY, None) or {}
        if not isinstance(body_args, dict):
            raise HydrationError("Action args must be an object")
        data.update(body)
        args.update(body_args)
    return data, args


def _call_action(component, action: str, args: dict):
    method = getattr(component, action)
    kwargs = {}
    for param in inspect.signature(method).parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.name in args:
            kind = param.annotation
            if kind is param.empty or not isinstance(kind, type):
                kind = None
            try:
                kwargs[param.name] = denormalize(args[param.name], kind)
            except (ValueError, TypeError, ValidationError) as exc:
                raise HydrationError(
                    f"Invalid argument {param.name!r} for {component.name}.{action}: {exc}"
                ) from exc
        elif param.default is param.empty:
            raise HydrationError(f"Missing argument {param.name!r} for {component.name}.{action}")

    logger.info("Running live action %s.%s", component.name, action)
    return method(**kwargs)


def _render_response(request, component):
    component.call_hooks(PRE_RERENDER)
    component_pre_rerender.send(sender=type(component), component=component, request=request)

    data = hydrator.dehydrate(component)
    html = component.render(request, live_data=data)

    media_type = json_media_type()
    if media_type in _accepted_types(request):
        return JsonResponse({"html": html, "data": data}, content_type=media_type)
    return HttpResponse(html)


@require_GET
def component_render(request, component_name):
    component = factory.get(component_name)
    state, _ = _request_data(request)
    hydrator.hydrate(component, state)
    return _render_response(request, component)


@csrf_exempt
@require_POST
def component_action(request, component_name, action):
    component_class = factory.get_class(component_name)

    if component_class.csrf and not csrf.check_request(request):
        logger.warning(
            "Rejected live action %s.%s: missing or invalid %s header",
            component_name,
            action,
            csrf.TOKEN_HEADER,
        )
        return HttpResponseBadRequest("Invalid CSRF token.")

    if not component_class.is_live_action(action):
        raise ActionNotFound(f"{action!r} is not a live action of {component_name!r}")

    component = component_class()
    state, args = _request_data(request)
    hydrator.hydrate(component, state)

    result = _call_action(component, action, args)
    component_action_performed.send(
        sender=component_class,
        component=component,
        request=request,
        action=action,
        response=result,
    )

    if isinstance(result, HttpResponseRedirectBase):
        if _accepted_types(request) & {"application/json", json_media_type()}:
            return JsonResponse({"redirect_url": result.url})
        return result
    if isinstance(result, HttpResponseBase):
        return result
    return _render_response(request, component)
