"""Password generation for new credentials."""

import secrets
import string

from ..constants import Limits

_ALPHABET = string.ascii_letters + string.digits


def random_password(length: int = Limits.RANDOM_PASSWORD_LENGTH) -> str:
    """
    Generate a random alphanumeric password.

    The alphabet has no characters that need quoting when the password is
    passed as an argument to htpasswd.
    """
    if length < 1:
        raise ValueError("Password length must be positive")
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))
