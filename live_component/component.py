"""
Base class and declarations for live components.

A live component is a plain Python object bound to a Django template. Its
``LiveProp`` attributes survive between requests by being dehydrated into
the rendered markup and hydrated again from the next request; methods
decorated with ``live_action`` can be invoked over AJAX.

    @register("counter")
    class Counter(LiveComponent):
        count = LiveProp(int, default=0)

        @live_action
        def increase(self, by: int = 1):
            self.count += by
"""

import inspect
import logging

from django.template.loader import render_to_string

logger = logging.getLogger(__name__)

PRE_RERENDER = "pre_rerender"
POST_HYDRATE = "post_hydrate"
PRE_DEHYDRATE = "pre_dehydrate"
HOOK_KINDS = (PRE_RERENDER, POST_HYDRATE, PRE_DEHYDRATE)

# Base class attributes kept out of the template context and of factory.create().
RESERVED_ATTRIBUTES = frozenset({"name", "template_name", "csrf"})


class LiveProp:
    """Declare a component attribute whose value round-trips through the client.

    ``type`` drives denormalization of incoming values; when omitted the
    class annotation of the attribute is used. Read-only props (the default)
    are covered by the checksum, writable props may be changed client-side.
    ``hydrate_with`` / ``dehydrate_with`` name component methods that replace
    the built-in (de)normalization for this prop.
    """

    def __init__(
        self,
        type=None,
        default=None,
        writable: bool = False,
        field_name: str | None = None,
        hydrate_with: str | None = None,
        dehydrate_with: str | None = None,
    ):
        self.type = type
        self.default = default
        self.writable = writable
        self.hydrate_with = hydrate_with
        self.dehydrate_with = dehydrate_with
        self._field_name = field_name
        self.name: str | None = None

    def __set_name__(self, owner, name):
        self.name = name
        if self.type is None:
            annotation = inspect.get_annotations(owner).get(name)
            if isinstance(annotation, type):
                self.type = annotation

    def __repr__(self):
        return f"<LiveProp {self.name} type={getattr(self.type, '__name__', self.type)}>"

    @property
    def field_name(self) -> str:
        """Key used for this prop in the dehydrated mapping."""
        return self._field_name or self.name

    def get_default(self):
        if callable(self.default):
            return self.default()
        return self.default


def live_action(func):
    """Expose ``func`` through ``POST /_components/<name>/<action>``."""
    func._live_action = True
    return func


def _hook(kind):
    def decorator(func):
        func._live_hook = kind
        return func

    decorator.__name__ = kind
    return decorator


pre_rerender = _hook(PRE_RERENDER)
post_hydrate = _hook(POST_HYDRATE)
pre_dehydrate = _hook(PRE_DEHYDRATE)


class LiveComponent:
    """Base class for every live component."""

    name: str | None = None
    template_name: str | None = None
    csrf = True

    _live_props: dict = {}
    _hooks: dict = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        props = {}
        hooked = {}
        # Walk the MRO base-first so overrides in subclasses win.
        for klass in reversed(cls.__mro__):
            for attr, value in vars(klass).items():
                if isinstance(value, LiveProp):
                    props[attr] = value
                elif attr in props:
                    del props[attr]
                if callable(value):
                    hooked[attr] = getattr(value, "_live_hook", None)
        cls._live_props = props
        cls._hooks = {
            kind: [attr for attr, hook in hooked.items() if hook == kind]
            for kind in HOOK_KINDS
        }

    def __init__(self):
        for attr, prop in self._live_props.items():
            setattr(self, attr, prop.get_default())

    def __repr__(self):
        return f"<{type(self).__name__} {self.name!r}>"

    @classmethod
    def get_component_name(cls) -> str:
        return cls.name

    @classmethod
    def live_props(cls) -> dict:
        return dict(cls._live_props)

    @classmethod
    def is_live_action(cls, action: str) -> bool:
        if action.startswith("_"):
            return False
        return bool(getattr(getattr(cls, action, None), "_live_action", False))

    @classmethod
    def live_actions(cls) -> list[str]:
        return sorted(attr for attr in dir(cls) if cls.is_live_action(attr))

    def call_hooks(self, kind: str) -> None:
        for attr in self._hooks.get(kind, ()):
            logger.debug("Calling %s hook %s.%s", kind, self.name, attr)
            getattr(self, attr)()

    def get_template_name(self) -> str:
        return self.template_name or f"components/{self.name}.html"

    def get_context_data(self, **kwargs) -> dict:
        context = {}
        for attr in dir(self):
            if attr.startswith("_") or attr in RESERVED_ATTRIBUTES:
                continue
            value = getattr(self, attr)
            if callable(value) and not isinstance(value, type):
                continue
            context[attr] = value
        context["component"] = self
        context["this"] = self
        context.update(kwargs)
        return context

    def render(self, request=None, **extra_context) -> str:
        context = self.get_context_data(**extra_context)
        return render_to_string(self.get_template_name(), context, request=request)
