"""JWT access token creation and validation (ES256).

Issuance (auth router) and validation (dependencies.py) share the same
key and claim schema through this module.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

from courseflow.core.config import SETTINGS

# Dev/test: an ephemeral EC key pair generated on import.
# Production: load from env var, file, or KMS (not implemented yet).
_private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "courseflow"
AUDIENCE = "courseflow-api"


def create_access_token(
    *,
    sub: str,
    roles: list[str] | None = None,
    sid: str | None = None,
    ttl_minutes: int | None = None,
) -> str:
    """Build and sign an access token.

    Claims: sub, iss, aud, exp, iat, jti, roles and, for students, sid
    (the session token checked by the session gate).
    """
    now = datetime.now(UTC)
    ttl = ttl_minutes if ttl_minutes is not None else SETTINGS.access_token_ttl_min
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ttl),
        "iat": now,
        "jti": str(uuid.uuid4()),
        "roles": roles or [],
    }
    if sid is not None:
        payload["sid"] = sid
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256 to prevent alg:none and alg-switching.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
