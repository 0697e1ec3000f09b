"""Action token utilities.

Live actions are called over AJAX with the token rendered in the
``data-live-csrf-value`` attribute of the component, sent back in the
``X-CSRF-TOKEN`` header. Tokens are signed with Django's
``TimestampSigner`` so they need no server-side storage; each one carries a
random nonce and the id of the user it was issued to, and expires after
``LIVE_COMPONENT_CSRF_MAX_AGE`` seconds.
"""

import logging

from django.conf import settings
from django.core import signing
from django.utils.crypto import constant_time_compare, get_random_string

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-CSRF-TOKEN"
TOKEN_SALT = "live_component.csrf.action"
DEFAULT_MAX_AGE = 60 * 60 * 12


def _user_key(request) -> str:
    user = getattr(request, "user", None) if request is not None else None
    if user is not None and user.is_authenticated:
        return str(user.pk)
    return "anonymous"


class LiveCsrfTokenManager:
    def __init__(self, salt: str = TOKEN_SALT):
        self.signer = signing.TimestampSigner(salt=salt)

    @property
    def max_age(self) -> int:
        return getattr(settings, "LIVE_COMPONENT_CSRF_MAX_AGE", DEFAULT_MAX_AGE)

    def make_token(self, request=None) -> str:
        """Return a fresh token for the user behind ``request``."""
        return self.signer.sign(f"{get_random_string(16)}.{_user_key(request)}")

    def check_token(self, request, token: str | None) -> bool:
        if not token:
            return False
        try:
            value = self.signer.unsign(token, max_age=self.max_age)
        except signing.SignatureExpired:
            logger.info("Expired live action token for %s", request.path)
            return False
        except signing.BadSignature:
            return False
        _, _, user_key = value.rpartition(".")
        return constant_time_compare(user_key, _user_key(request))


token_manager = LiveCsrfTokenManager()


def get_token(request=None) -> str:
    return token_manager.make_token(request)


def check_request(request) -> bool:
    """Validate the ``X-CSRF-TOKEN`` header of ``request``."""
    return token_manager.check_token(request, request.headers.get(TOKEN_HEADER))
