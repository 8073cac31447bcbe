"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_settings() : configuration courante (surchargée dans les tests).

get_ingestion_pipeline() : assemble le pipeline vidéo (runner, staging, S3) pour une requête.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Chaque brique est remplaçable via app.dependency_overrides (fake ffprobe, fake S3...).
"""

from datetime import timedelta
from typing import Optional

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from tubely.core.config import Settings, settings as app_settings
from tubely.db.session import get_session
from tubely.db.repositories.users import UserRepository
from tubely.db.repositories.videos import VideoRepository
from tubely.db.repositories.refresh_tokens import RefreshTokenRepository
from tubely.features.authentication.services import AuthService
from tubely.features.videos.services import VideoService
from tubely.features.media.process import ProcessRunner
from tubely.features.media.publisher import ObjectPublisher
from tubely.features.media.pipeline import IngestionPipeline
from tubely.features.media.thumbnails import ThumbnailService
from tubely.security.tokens import JWTSettings


def get_settings() -> Settings:
    return app_settings


# -----------------------------
# Auth
# -----------------------------
def get_jwt_settings(settings: Settings = Depends(get_settings)) -> JWTSettings:
    return JWTSettings(
        secret=settings.JWT_SECRET_KEY,
        issuer=settings.JWT_ISSUER,
        algorithm=settings.JWT_ALGORITHM,
        access_ttl=timedelta(minutes=settings.ACCESS_TTL_MINUTES),
        refresh_ttl=timedelta(days=settings.REFRESH_TTL_DAYS),
    )


def get_auth_service(
    session: Session = Depends(get_session),
    jwt_settings: JWTSettings = Depends(get_jwt_settings),
) -> AuthService:
    return AuthService(
        user_repo=UserRepository(session),
        refresh_repo=RefreshTokenRepository(session),
        jwt_settings=jwt_settings,
    )


# auto_error=False : l'absence de token est traitée par AuthService (401),
# après la validation de l'id de la vidéo
bearer_scheme = HTTPBearer(auto_error=False)

def get_access_token_from_bearer(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Optional[str]:
    if not credentials or credentials.scheme.lower() != "bearer":
        return None
    return credentials.credentials


# -----------------------------
# Repositories / services
# -----------------------------
def get_video_repository(session: Session = Depends(get_session)) -> VideoRepository:
    return VideoRepository(session)

def get_video_service(video_repo: VideoRepository = Depends(get_video_repository)) -> VideoService:
    return VideoService(video_repo)


# -----------------------------
# Media
# -----------------------------
def get_process_runner(settings: Settings = Depends(get_settings)) -> ProcessRunner:
    return ProcessRunner(timeout=settings.tool_timeout)

def get_object_publisher(settings: Settings = Depends(get_settings)) -> ObjectPublisher:
    return ObjectPublisher.from_settings(settings)

def get_ingestion_pipeline(
    settings: Settings = Depends(get_settings),
    video_repo: VideoRepository = Depends(get_video_repository),
    runner: ProcessRunner = Depends(get_process_runner),
    publisher: ObjectPublisher = Depends(get_object_publisher),
) -> IngestionPipeline:
    return IngestionPipeline.from_settings(
        settings,
        repo=video_repo,
        runner=runner,
        publisher=publisher,
    )

def get_thumbnail_service(
    settings: Settings = Depends(get_settings),
    video_repo: VideoRepository = Depends(get_video_repository),
) -> ThumbnailService:
    return ThumbnailService(settings=settings, repo=video_repo)
