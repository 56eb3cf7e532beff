"""Bearer tokens whose ``sub`` claim is the account id."""

from datetime import datetime, timedelta, timezone

import jwt

from physiobook.core import config

REQUIRED_CLAIMS = ['sub', 'exp']


def create_access_token(user_id: int, expires_minutes: int | None = None) -> str:
    if expires_minutes is None:
        expires_minutes = config.JWT_EXPIRES_MINUTES

    issued_at = datetime.now(timezone.utc)
    claims = {
        'sub': str(user_id),
        'iat': issued_at,
        'exp': issued_at + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(claims, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature, expiry and required claims; raises ``jwt.InvalidTokenError``."""
    return jwt.decode(
        token,
        config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        options={'require': REQUIRED_CLAIMS},
    )
