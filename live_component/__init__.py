from .component import (
    LiveComponent,
    LiveProp,
    live_action,
    post_hydrate,
    pre_dehydrate,
    pre_rerender,
)
from .factory import ComponentFactory, factory, register
from .hydrator import LiveComponentHydrator, dehydrated_query, hydrator

__all__ = [
    "ComponentFactory",
    "LiveComponent",
    "LiveComponentHydrator",
    "LiveProp",
    "dehydrated_query",
    "factory",
    "hydrator",
    "live_action",
    "post_hydrate",
    "pre_dehydrate",
    "pre_rerender",
    "register",
]
