import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TypedDict

from jose import jwt

# ==========================================================
# 🔧 Configuration : paramètres de génération/validation JWT
# ==========================================================

@dataclass(frozen=True)
class JWTSettings:
    """
    Configuration des tokens.

    - `secret` : clé secrète pour signer/valider les access tokens
    - `issuer` : émetteur (vérifié au décodage)
    - `algorithm` : algo de signature (HS256 recommandé)
    - `access_ttl` : durée de vie d'un access token (JWT)
    - `refresh_ttl` : durée de vie d'un refresh token (opaque, stocké en base)
    """
    secret: str
    issuer: str = "tubely-access"
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(hours=1)
    refresh_ttl: timedelta = timedelta(days=60)


class DecodedToken(TypedDict, total=False):
    iss: str
    sub: str            # identifiant utilisateur
    iat: int
    exp: int


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ==========================================================
# 🎟️ Génération
# ==========================================================

def create_access_token(*, user_id: int, settings: JWTSettings) -> str:
    now = _now()
    payload: DecodedToken = {
        "iss": settings.issuer,
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int((now + settings.access_ttl).timestamp()),
    }
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


def make_refresh_token() -> str:
    """Refresh token opaque : 32 octets aléatoires en hexadécimal."""
    return secrets.token_hex(32)


# ==========================================================
# 🔍 Décodage / Validation
# ==========================================================

def decode_token(token: str, settings: JWTSettings) -> DecodedToken:
    """
    Décode et valide un access token (signature, expiration, émetteur).
    Lève jose.JWTError si invalide.
    """
    return jwt.decode(
        token,
        settings.secret,
        algorithms=[settings.algorithm],
        issuer=settings.issuer,
        options={"verify_aud": False},
    )
