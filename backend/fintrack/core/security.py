from datetime import datetime, timedelta, timezone

import jwt

from fintrack.core.config import settings


def create_access_token(sub: str, expires_min: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = expires_min if expires_min is not None else settings.jwt_expires_min
    payload = {
        "sub": sub,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg)

def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_alg])
