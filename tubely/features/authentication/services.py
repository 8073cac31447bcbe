import logging
from datetime import datetime
from typing import Callable, Optional

from jose import JWTError

from tubely.core.errors import AuthenticationError, ConflictError
from tubely.db.models.base import as_utc, utcnow
from tubely.db.models.users import User
from tubely.db.repositories.users import UserRepository
from tubely.db.repositories.refresh_tokens import RefreshTokenRepository
from tubely.security.password import verify_password, hash_password
from tubely.security.tokens import (
    JWTSettings,
    create_access_token,
    decode_token,
    make_refresh_token,
)
from tubely.features.authentication.schemas import (
    SignUpIn,
    SignInIn,
    SignInOut,
    AccessTokenOut,
    UserOut,
    RefreshIn,
    RevokeIn,
)

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service d'authentification : orchestre les repositories + tokens.
    Ne contient pas d'accès SQL direct et lève des erreurs HTTP typées.
    """

    def __init__(
        self,
        *,
        user_repo: UserRepository,
        refresh_repo: RefreshTokenRepository,
        jwt_settings: JWTSettings,
        now_fn: Callable[[], datetime] = utcnow,
    ):
        self.user_repo = user_repo
        self.refresh_repo = refresh_repo
        self.jwt = jwt_settings
        self.now_fn = now_fn

    # ---------- Sign up ----------
    def sign_up(self, payload: SignUpIn) -> User:
        if self.user_repo.get_by_email(payload.email):
            raise ConflictError("Email already registered")
        user = self.user_repo.create(
            email=payload.email,
            hashed_password=hash_password(payload.password),
        )
        logger.info("user %s created", user.id)
        return user

    # ---------- Sign in ----------
    def sign_in(self, payload: SignInIn) -> SignInOut:
        user = self.user_repo.get_by_email(payload.email)
        if not user or not verify_password(payload.password, user.hashed_password):
            # Ne pas révéler si l'utilisateur existe
            raise AuthenticationError("Incorrect email or password")

        access = create_access_token(user_id=user.id, settings=self.jwt)
        refresh = make_refresh_token()
        self.refresh_repo.create(
            token=refresh,
            user_id=user.id,
            expires_at=self.now_fn() + self.jwt.refresh_ttl,
        )

        return SignInOut(
            user=UserOut.model_validate(user),
            access_token=access,
            refresh_token=refresh,
            expires_in=int(self.jwt.access_ttl.total_seconds()),
        )

    # ---------- Refresh ----------
    def refresh(self, payload: RefreshIn) -> AccessTokenOut:
        record = self.refresh_repo.get_by_token(payload.refresh_token)
        if not record or record.revoked_at is not None or as_utc(record.expires_at) <= self.now_fn():
            raise AuthenticationError("Couldn't validate refresh token")

        return AccessTokenOut(
            access_token=create_access_token(user_id=record.user_id, settings=self.jwt),
            expires_in=int(self.jwt.access_ttl.total_seconds()),
        )

    # ---------- Revoke ----------
    def revoke(self, payload: RevokeIn) -> None:
        # idempotent : un token inconnu ou déjà révoqué n'est pas une erreur
        self.refresh_repo.revoke(payload.refresh_token)

    # ---------- Current user depuis access token ----------
    def get_current_user(self, *, access_token: Optional[str]) -> User:
        if not access_token:
            raise AuthenticationError("Couldn't find JWT")
        try:
            decoded = decode_token(access_token, self.jwt)
            user_id = int(decoded["sub"])
        except (JWTError, KeyError, ValueError):
            raise AuthenticationError("Couldn't validate JWT")

        user = self.user_repo.get(user_id)
        if not user:
            raise AuthenticationError("Couldn't validate JWT")
        return user
