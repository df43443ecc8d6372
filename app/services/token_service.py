"""JWT access token validation (ES256), plus dev/test issuance.

Issuing tokens belongs to the marketplace's auth service.  This service
only verifies them: ``dependencies.py`` decodes the bearer token into a
Principal.  In dev and test an ephemeral key pair is generated on import
and ``create_access_token`` mints tokens against it; when
JWT_PUBLIC_KEY_PATH is configured the auth service's public key is used
for verification and local minting is disabled.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from pathlib import Path

import jwt
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from app.core.config import SETTINGS

ALGORITHM = "ES256"
ISSUER = "auth-service"
AUDIENCE = "course-catalog"
ACCESS_TOKEN_TTL_MIN = 15

if SETTINGS.jwt_public_key_path:
    _private_key: ec.EllipticCurvePrivateKey | None = None
    _public_key = load_pem_public_key(Path(SETTINGS.jwt_public_key_path).read_bytes())
else:
    _private_key = ec.generate_private_key(ec.SECP256R1())
    _public_key = _private_key.public_key()


def create_access_token(
    *,
    sub: str,
    roles: list[str] | None = None,
    name: str | None = None,
    ttl_minutes: int = ACCESS_TOKEN_TTL_MIN,
) -> str:
    """Mint a token against the local ephemeral key (dev/test only)."""
    if _private_key is None:
        raise RuntimeError("Token issuance is disabled when JWT_PUBLIC_KEY_PATH is set")
    now = datetime.now(UTC)
    payload: dict[str, object] = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ttl_minutes),
        "iat": now,
        "jti": str(uuid.uuid4()),
        "roles": roles or ["student"],
    }
    if name:
        payload["name"] = name
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    The algorithm is pinned to ES256; exp, iss and aud are checked by
    PyJWT.  Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat"]},
    )
