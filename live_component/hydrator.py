"""
Component state <-> request parameters.

``dehydrate`` turns every ``LiveProp`` of a component into a primitive value
(something that survives JSON and a query string) and appends a
``_checksum``. ``hydrate`` does the reverse and refuses state whose
read-only props do not match that checksum.

The checksum is computed over the canonical string form of the *dehydrated*
read-only values. ``hydrate`` verifies it from the raw request values before
anything is coerced, so tampered state never reaches the database or a
``hydrate_with`` method. ``1`` (from a JSON body) and ``"1"`` (from a query
string) verify identically.
"""

import json
import logging
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from urllib.parse import urlencode

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.crypto import constant_time_compare, salted_hmac
from django.utils.dateparse import parse_date, parse_datetime, parse_time

from .component import POST_HYDRATE, PRE_DEHYDRATE
from .exceptions import HydrationError, InvalidChecksum

logger = logging.getLogger(__name__)

CHECKSUM_KEY = "_checksum"
CHECKSUM_SALT = "live_component.hydrator.checksum"

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


def _canonical(value, kind=None) -> str:
    """String form of a dehydrated or raw request value, as fed to the checksum.

    Only parses text; never touches the database.
    """
    if value is None or value == "":
        return ""
    if kind is bool or isinstance(value, bool):
        text = str(value).strip().lower()
        if text in TRUE_VALUES:
            return "1"
        if text in FALSE_VALUES:
            return "0"
        return str(value)
    if kind is float:
        try:
            return repr(float(value))
        except (TypeError, ValueError):
            return str(value)
    if kind in (list, dict) and isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return value
    if isinstance(value, (list, dict)):
        return json.dumps(value, sort_keys=True, separators=(",", ":"))
    return str(value)


def dehydrated_query(data: dict) -> str:
    """Encode a dehydrated mapping the way a client sends it back."""
    return urlencode(
        {
            key: json.dumps(value) if isinstance(value, (list, dict)) else ("" if value is None else value)
            for key, value in data.items()
        }
    )


def normalize(value):
    """Return a primitive-safe representation of ``value``."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, models.Model):
        return value.pk
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [normalize(item) for item in value]
    if isinstance(value, dict):
        return {str(key): normalize(item) for key, item in value.items()}
    raise HydrationError(f"Cannot dehydrate value of type {type(value).__name__}")


def denormalize(value, kind):
    """Coerce ``value`` coming from a request into ``kind``.

    Raises ``ValueError`` / ``TypeError`` for values that cannot be coerced.
    """
    if kind is None:
        return value
    if value is None or (value == "" and kind is not str):
        return None
    if isinstance(value, kind) and not (kind is int and isinstance(value, bool)):
        return value

    if kind is bool:
        text = str(value).strip().lower()
        if text in TRUE_VALUES:
            return True
        if text in FALSE_VALUES:
            return False
        raise ValueError(f"{value!r} is not a boolean")
    if kind in (int, float, str):
        return kind(value)
    if kind is Decimal:
        try:
            return Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"{value!r} is not a decimal") from exc
    if kind is datetime:
        parsed = parse_datetime(str(value))
        if parsed is None:
            raise ValueError(f"{value!r} is not a datetime")
        return parsed
    if kind is date:
        parsed = parse_date(str(value))
        if parsed is None:
            raise ValueError(f"{value!r} is not a date")
        return parsed
    if kind is time:
        parsed = parse_time(str(value))
        if parsed is None:
            raise ValueError(f"{value!r} is not a time")
        return parsed
    if kind in (list, dict):
        loaded = json.loads(value) if isinstance(value, str) else value
        if not isinstance(loaded, kind):
            raise ValueError(f"{value!r} is not a {kind.__name__}")
        return loaded
    if isinstance(kind, type) and issubclass(kind, models.Model):
        try:
            return kind._default_manager.get(pk=value)
        except kind.DoesNotExist as exc:
            raise ValueError(f"{kind.__name__} {value!r} does not exist") from exc
        except OverflowError as exc:
            raise ValueError(f"{value!r} is not a valid {kind.__name__} key") from exc
    raise TypeError(f"Unsupported live prop type {kind!r}")


class LiveComponentHydrator:
    """Dehydrate components into request data and hydrate them back."""

    def __init__(self, secret: str | None = None):
        self.secret = secret

    def compute_checksum(self, component, values: dict) -> str:
        """HMAC over the read-only props of ``component`` found in ``values``.

        ``values`` holds dehydrated or raw request values, never coerced ones.
        """
        readonly = sorted(
            (prop.field_name, _canonical(values.get(prop.field_name), prop.type))
            for prop in component.live_props().values()
            if not prop.writable
        )
        return salted_hmac(CHECKSUM_SALT, urlencode(readonly), secret=self.secret).hexdigest()

    @staticmethod
    def _dehydrate_prop(component, attr, prop):
        value = getattr(component, attr)
        if prop.dehydrate_with:
            value = getattr(component, prop.dehydrate_with)(value)
        return normalize(value)

    def dehydrate(self, component) -> dict:
        component.call_hooks(PRE_DEHYDRATE)
        data = {}
        for attr, prop in component.live_props().items():
            data[prop.field_name] = self._dehydrate_prop(component, attr, prop)
        data[CHECKSUM_KEY] = self.compute_checksum(component, data)
        return data

    def verify(self, component, data) -> None:
        """Raise ``InvalidChecksum`` unless ``data`` carries the checksum of its read-only props.

        Read-only props missing from ``data`` count as their current default.
        """
        checksum = data.get(CHECKSUM_KEY)
        if not checksum:
            raise InvalidChecksum(f"Missing checksum for component {component.name!r}")

        raw = {}
        for attr, prop in component.live_props().items():
            if prop.writable:
                continue
            if prop.field_name in data:
                raw[prop.field_name] = data.get(prop.field_name)
            else:
                raw[prop.field_name] = self._dehydrate_prop(component, attr, prop)

        expected = self.compute_checksum(component, raw)
        if not constant_time_compare(expected, str(checksum)):
            logger.warning("Checksum mismatch while hydrating component %s", component.name)
            raise InvalidChecksum(f"Invalid checksum for component {component.name!r}")

    def hydrate(self, component, data) -> None:
        """Restore the live props of ``component`` from ``data``.

        ``data`` may be a plain dict or a ``QueryDict``; props missing from it
        keep their default. The checksum is verified before any value is
        coerced. Raises ``HydrationError`` on tampered or invalid state.
        """
        self.verify(component, data)

        for attr, prop in component.live_props().items():
            if prop.field_name not in data:
                continue
            raw = data.get(prop.field_name)
            if raw == "" and prop.get_default() is None:
                # None travels as "" in a query string
                setattr(component, attr, None)
                continue
            try:
                if prop.hydrate_with:
                    value = getattr(component, prop.hydrate_with)(raw)
                else:
                    value = denormalize(raw, prop.type)
            except (ValueError, TypeError, ValidationError) as exc:
                raise HydrationError(
                    f"Invalid value for {component.name}.{prop.field_name}: {exc}"
                ) from exc
            setattr(component, attr, value)

        component.call_hooks(POST_HYDRATE)


hydrator = LiveComponentHydrator()
