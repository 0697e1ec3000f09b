from __future__ import annotations

import json

from django import template
from django.urls import reverse
from django.utils.html import format_html
from django.utils.safestring import mark_safe

from live_component import csrf
from live_component.factory import factory
from live_component.hydrator import hydrator

register = template.Library()


@register.simple_tag(takes_context=True)
def component(context, name: str, **props) -> str:
    """Mount component ``name`` with ``props`` and render it in place."""
    request = context.get("request")
    instance = factory.create(name, props)
    html = instance.render(request, live_data=hydrator.dehydrate(instance))
    return mark_safe(html)


@register.simple_tag(takes_context=True)
def live_attributes(context) -> str:
    """Attributes for the root element of a component template."""
    instance = context["component"]
    data = context.get("live_data")
    if data is None:
        data = hydrator.dehydrate(instance)

    attributes = format_html(
        'data-controller="live" data-live-url-value="{}" data-live-data-value="{}"',
        reverse("live_component:render", args=[instance.name]),
        json.dumps(data),
    )
    if instance.csrf:
        attributes += format_html(
            ' data-live-csrf-value="{}"', csrf.get_token(context.get("request"))
        )
    return attributes
