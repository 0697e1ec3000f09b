from django.core.exceptions import SuspiciousOperation
from django.http import Http404


class ComponentError(Exception):
    """Raised when a component class is misused by application code."""


class ComponentNotFound(Http404):
    """No component is registered under the requested name."""


class ActionNotFound(Http404):
    """The requested method does not exist or is not a live action."""


class HydrationError(SuspiciousOperation):
    """Incoming component state was tampered with or cannot be restored."""


class InvalidChecksum(HydrationError):
    pass
