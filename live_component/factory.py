"""Registry of live components, looked up by name."""

import inspect
import logging

from .component import RESERVED_ATTRIBUTES, LiveComponent
from .exceptions import ComponentError, ComponentNotFound

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Create component instances from their registered name."""

    def __init__(self):
        self._registry: dict[str, type[LiveComponent]] = {}

    def register(self, name: str, component_class: type[LiveComponent]) -> None:
        if not issubclass(component_class, LiveComponent):
            raise ComponentError(f"{component_class!r} is not a LiveComponent subclass")
        existing = self._registry.get(name)
        if existing is not None and existing is not component_class:
            raise ComponentError(
                f"Component name {name!r} is already used by {existing.__qualname__}"
            )
        component_class.name = name
        self._registry[name] = component_class
        logger.debug("Registered live component %s -> %s", name, component_class.__qualname__)

    def unregister(self, name: str) -> None:
        self._registry.pop(name, None)

    def names(self) -> list[str]:
        return sorted(self._registry)

    def get_class(self, name: str) -> type[LiveComponent]:
        try:
            return self._registry[name]
        except KeyError:
            raise ComponentNotFound(f"Unknown component {name!r}") from None

    def get(self, name: str) -> LiveComponent:
        """Return a blank instance, ready to be hydrated."""
        return self.get_class(name)()

    def create(self, name: str, data: dict | None = None) -> LiveComponent:
        """Return a mounted instance.

        Keys matching the parameters of ``mount()`` are passed to it; the
        rest are assigned to public attributes of the component.
        """
        component = self.get(name)
        data = dict(data or {})

        mount = getattr(component, "mount", None)
        if mount is not None:
            kwargs = {}
            for param in inspect.signature(mount).parameters.values():
                if param.name in data:
                    kwargs[param.name] = data.pop(param.name)
                elif param.default is inspect.Parameter.empty and param.kind in (
                    param.POSITIONAL_OR_KEYWORD,
                    param.KEYWORD_ONLY,
                ):
                    raise ComponentError(
                        f"Component {name!r} requires {param.name!r} to be mounted"
                    )
            mount(**kwargs)

        for key, value in data.items():
            if (
                key.startswith("_")
                or key in RESERVED_ATTRIBUTES
                or not hasattr(component, key)
                or callable(getattr(type(component), key, None))
            ):
                raise ComponentError(f"Component {name!r} has no public property {key!r}")
            setattr(component, key, value)
        return component


factory = ComponentFactory()


def register(name: str | None = None):
    """Class decorator adding a component to the default factory.

    The name defaults to the lower-cased class name.
    """

    def decorator(component_class):
        factory.register(name or component_class.__name__.lower(), component_class)
        return component_class

    return decorator
