"""
Management command listing the registered live components
"""
from django.core.management.base import BaseCommand, CommandError

from live_component.exceptions import ComponentNotFound
from live_component.factory import factory


class Command(BaseCommand):
    help = "List registered live components with their props and actions"

    def add_arguments(self, parser):
        parser.add_argument("names", nargs="*", help="Only show these components")

    def handle(self, *args, **options):
        names = options["names"] or factory.names()
        if not names:
            self.stdout.write("No live components registered.")
            return

        for name in names:
            try:
                component_class = factory.get_class(name)
            except ComponentNotFound:
                raise CommandError(f"Unknown component {name!r}")

            self.stdout.write(self.style.SUCCESS(name))
            self.stdout.write(f"  class:    {component_class.__module__}.{component_class.__qualname__}")
            self.stdout.write(f"  template: {component_class().get_template_name()}")
            self.stdout.write(f"  csrf:     {'yes' if component_class.csrf else 'no'}")
            for prop in component_class.live_props().values():
                kind = getattr(prop.type, "__name__", "any")
                mode = "writable" if prop.writable else "read-only"
                self.stdout.write(f"  prop:     {prop.field_name} ({kind}, {mode})")
            for action in component_class.live_actions():
                self.stdout.write(f"  action:   {action}")
