"""
➡️ But : Orchestrer l'ingestion d'une vidéo uploadée.

    VALIDATE -> STAGE -> PROBE -> REWRITE -> PUBLISH -> UPDATE_RECORD -> CLEANUP

- L'id et l'authentification sont vérifiés par la route (avant d'appeler run()).
- Existence puis propriété de la vidéo sont vérifiées AVANT de lire le corps de la requête.
- Toute erreur court-circuite le pipeline ; le nettoyage des fichiers temporaires
  est inconditionnel (succès, erreur, annulation de la requête).
- L'enregistrement n'est modifié qu'une fois, après une publication réussie.
- Pas de coordination entre deux uploads concurrents sur la même vidéo :
  le dernier à écrire l'emporte.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from tubely.core.config import Settings
from tubely.core.errors import ValidationError
from tubely.db.models.base import utcnow
from tubely.db.models.videos import Video
from tubely.db.repositories.videos import VideoRepository
from tubely.features.media.faststart import FastStartRewriter
from tubely.features.media.probe import AspectRatioProber
from tubely.features.media.process import ProcessRunner
from tubely.features.media.publisher import ObjectPublisher, build_video_key
from tubely.features.media.staging import ByteSource, LocalStagingArea
from tubely.features.videos.services import get_owned_video
from tubely.utils.media_files import extension_for

logger = logging.getLogger(__name__)


@dataclass
class UploadRequest:
    media_type: Optional[str]
    source: ByteSource
    size: Optional[int] = None  # taille déclarée, si connue


# Chargement différé du corps : appelé seulement une fois la propriété vérifiée
UploadLoader = Callable[[], Awaitable[Optional[UploadRequest]]]


class IngestionPipeline:
    def __init__(
        self,
        *,
        settings: Settings,
        repo: VideoRepository,
        staging: LocalStagingArea,
        prober: AspectRatioProber,
        rewriter: FastStartRewriter,
        publisher: ObjectPublisher,
    ):
        self.settings = settings
        self.repo = repo
        self.staging = staging
        self.prober = prober
        self.rewriter = rewriter
        self.publisher = publisher

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        repo: VideoRepository,
        runner: Optional[ProcessRunner] = None,
        publisher: Optional[ObjectPublisher] = None,
    ) -> "IngestionPipeline":
        runner = runner or ProcessRunner(timeout=settings.tool_timeout)
        return cls(
            settings=settings,
            repo=repo,
            staging=LocalStagingArea(settings.ASSETS_ROOT),
            prober=AspectRatioProber(runner, ffprobe_bin=settings.FFPROBE_BIN),
            rewriter=FastStartRewriter(runner, ffmpeg_bin=settings.FFMPEG_BIN),
            publisher=publisher or ObjectPublisher.from_settings(settings),
        )

    async def run(self, *, video_id: uuid.UUID, user_id: int, load_upload: UploadLoader) -> Video:
        video = get_owned_video(self.repo, video_id, user_id)
        logger.info("uploading video for video %s by user %s", video_id, user_id)

        upload = await load_upload()
        self._validate(upload)
        extension = extension_for(upload.media_type)

        async with self.staging.scope() as scope:
            staged = await scope.stage(
                upload.source,
                extension=extension,
                max_bytes=self.settings.MAX_VIDEO_UPLOAD_BYTES,
            )
            orientation = await self.prober.probe(staged.path)

            processed = scope.reserve(self.rewriter.output_path_for(staged.path))
            await self.rewriter.rewrite(staged.path)

            key = build_video_key(orientation, staged.name, extension)
            location = await self.publisher.publish(processed.path, key, upload.media_type)

            video = self.repo.update(video, video_url=location.url, updated_at=utcnow())

        logger.info("video %s available at %s", video_id, location.url)
        return video

    def _validate(self, upload: Optional[UploadRequest]) -> None:
        # ordre : champ présent -> taille -> type
        if upload is None:
            raise ValidationError("Invalid Video")
        if upload.size is not None and upload.size > self.settings.MAX_VIDEO_UPLOAD_BYTES:
            raise ValidationError("File Too Big")
        if upload.media_type not in self.settings.ALLOWED_VIDEO_MIME:
            raise ValidationError("Invalid File Type")
