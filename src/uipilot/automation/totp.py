import binascii
from datetime import datetime
from typing import Optional, Union

import pyotp

from .errors import PreconditionError

Instant = Union[datetime, int, float]


def generate_code(secret: str, at: Optional[Instant] = None, digits: int = 6, interval: int = 30) -> str:
    """Return the RFC 6238 one-time code for ``secret`` at ``at`` (default: now).

    ``secret`` is the base32 key shown when the authenticator app was enrolled;
    spaces and lower case are tolerated.
    """
    if not secret:
        raise PreconditionError("MFA secret is required to generate a one-time code")
    if not 6 <= digits <= 8:
        raise PreconditionError(f"digits must be between 6 and 8, got {digits}")
    key = secret.replace(" ", "").upper()
    totp = pyotp.TOTP(key, digits=digits, interval=interval)
    try:
        return totp.at(datetime.now() if at is None else at)
    except (binascii.Error, ValueError) as e:
        raise PreconditionError(f"MFA secret is not valid base32: {e}") from e
