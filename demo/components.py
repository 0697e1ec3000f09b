from datetime import datetime

from django.shortcuts import redirect

from live_component import LiveComponent, LiveProp, live_action, pre_rerender, register

from .models import Entity1


@register("component1")
class Component1(LiveComponent):
    prop1 = LiveProp(Entity1)
    prop2 = LiveProp(datetime)
    prop3 = LiveProp(str)
    # Public but not live: dropped between requests.
    prop4 = None


@register("component2")
class Component2(LiveComponent):
    count = LiveProp(int, default=1)
    before_rerender_called = False

    @live_action
    def increase(self):
        self.count += 1

    @live_action
    def redirect(self):
        return redirect("home")

    @pre_rerender
    def mark_rerendered(self):
        self.before_rerender_called = True


@register("counter")
class Counter(LiveComponent):
    """Counter with a writable step, showing action args."""

    count = LiveProp(int, default=0)
    step = LiveProp(int, default=1, writable=True)

    def mount(self, start: int = 0):
        self.count = start

    @live_action
    def increase(self, by: int = 0):
        self.count += by or self.step

    @live_action
    def reset(self):
        self.count = 0
