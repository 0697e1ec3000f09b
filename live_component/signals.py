from django.dispatch import Signal

# Sent with ``component`` and ``request`` right before a component is
# re-rendered by the live endpoints. Never sent for full-page renders.
component_pre_rerender = Signal()

# Sent with ``component``, ``request``, ``action`` and ``response`` (the
# value returned by the action method) after a live action ran.
component_action_performed = Signal()
