"""
➡️ But : Centraliser tous les paramètres configurables (app, DB, JWT, stockage, outils vidéo).

Utilise pydantic-settings pour charger automatiquement les variables d'environnement (.env, variables système…).

L'objet `settings` global ne sert qu'au câblage de l'app HTTP ; les services
(pipeline d'ingestion, miniatures) reçoivent leur Settings explicitement à la construction :

    pipeline = IngestionPipeline.from_settings(settings, repo=...)

🔹 Avantages :

Plusieurs instances (ex: tests) peuvent utiliser des configurations indépendantes.

Facilite le passage entre environnements (dev / prod / test).
"""

from pathlib import Path
from typing import Optional, Set

from pydantic import model_validator
from pydantic_settings import BaseSettings

from tubely.utils.media_files import EXTENSIONS


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "Tubely"
    ENV: str = "dev"  # dev | prod | test
    PORT: int = 8091
    PUBLIC_BASE_URL: Optional[str] = None  # auto depuis PORT si None
    LOG_LEVEL: str = "INFO"

    # -----------------------------
    # DB
    # -----------------------------
    SQLITE_PATH: str = "tubely.db"
    DATABASE_URL: Optional[str] = None

    # -----------------------------
    # JWT / Auth
    # -----------------------------
    JWT_SECRET_KEY: str = "CHANGE_ME"     # ⚠️ change en prod
    JWT_ISSUER: str = "tubely-access"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TTL_MINUTES: int = 60
    REFRESH_TTL_DAYS: int = 60

    # -----------------------------
    # Médias (staging local + limites)
    # -----------------------------
    ASSETS_ROOT: Path = Path("assets")
    MAX_VIDEO_UPLOAD_BYTES: int = 1 << 30       # 1 GiB
    MAX_THUMBNAIL_UPLOAD_BYTES: int = 10 << 20  # 10 MiB
    ALLOWED_VIDEO_MIME: Set[str] = {"video/mp4"}
    ALLOWED_THUMBNAIL_MIME: Set[str] = {"image/jpeg", "image/png"}

    # -----------------------------
    # Outils externes
    # -----------------------------
    FFPROBE_BIN: str = "ffprobe"
    FFMPEG_BIN: str = "ffmpeg"
    TOOL_TIMEOUT_SECONDS: float = 300.0  # 0 = pas de limite

    # -----------------------------
    # S3 / CloudFront
    # -----------------------------
    S3_BUCKET: str = "tubely-videos"
    S3_REGION: str = "us-east-1"
    # Si défini, les URLs publiques passent par la distribution CloudFront
    S3_CF_DISTRIBUTION: Optional[str] = None
    # Endpoint custom (MinIO, localstack...) : n'affecte que le client, pas les URLs publiques
    S3_ENDPOINT: Optional[str] = None
    S3_KEY: Optional[str] = None
    S3_SECRET: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    # -----------------------------
    # Post-process values
    # -----------------------------
    def model_post_init(self, __context):
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")

        if not self.PUBLIC_BASE_URL:
            object.__setattr__(self, "PUBLIC_BASE_URL", f"http://localhost:{self.PORT}")

        if self.S3_CF_DISTRIBUTION:
            object.__setattr__(self, "S3_CF_DISTRIBUTION", self.S3_CF_DISTRIBUTION.rstrip("/"))

    @model_validator(mode="after")
    def check_media_types(self) -> "Settings":
        # chaque type accepté doit avoir une extension connue
        unknown = (self.ALLOWED_VIDEO_MIME | self.ALLOWED_THUMBNAIL_MIME) - set(EXTENSIONS)
        if unknown:
            raise ValueError(f"no file extension for media type(s): {', '.join(sorted(unknown))}")
        return self

    @property
    def tool_timeout(self) -> Optional[float]:
        return self.TOOL_TIMEOUT_SECONDS or None


# Instance globale pour le câblage de l'app
settings = Settings()
