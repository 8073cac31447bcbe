import asyncio
import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import Optional, Tuple
from urllib.parse import urlparse

from tubely.core.config import Settings
from tubely.core.errors import NotFoundError, StagingError, ValidationError
from tubely.db.models.base import utcnow
from tubely.db.models.videos import Video
from tubely.db.repositories.videos import VideoRepository
from tubely.features.media.pipeline import UploadLoader
from tubely.features.videos.services import get_owned_video
from tubely.utils.media_files import MIME_BY_EXTENSION, extension_for, sniff_mime

logger = logging.getLogger(__name__)


class ThumbnailService:
    """
    Miniatures : même validation que les vidéos, sans pipeline.
    Le fichier est écrit directement dans ASSETS_ROOT/{video_id}.{ext}
    et servi par le montage statique /assets.
    """

    def __init__(self, *, settings: Settings, repo: VideoRepository):
        self.settings = settings
        self.repo = repo

    async def upload(self, *, video_id: uuid.UUID, user_id: int, load_upload: UploadLoader) -> Video:
        video = get_owned_video(self.repo, video_id, user_id)
        logger.info("uploading thumbnail for video %s by user %s", video_id, user_id)

        upload = await load_upload()
        max_bytes = self.settings.MAX_THUMBNAIL_UPLOAD_BYTES
        if upload is None:
            raise ValidationError("Invalid Thumbnail")
        if upload.size is not None and upload.size > max_bytes:
            raise ValidationError("File Too Big")
        if upload.media_type not in self.settings.ALLOWED_THUMBNAIL_MIME:
            raise ValidationError("Invalid File Type")

        data = await upload.source.read(max_bytes + 1)
        if len(data) > max_bytes:
            raise ValidationError("File Too Big")
        if sniff_mime(data) != upload.media_type:
            raise ValidationError("Invalid File Type")

        filename = f"{video_id}.{extension_for(upload.media_type)}"
        path = Path(self.settings.ASSETS_ROOT) / filename
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as e:
            logger.error("could not write thumbnail %s: %s", path, e)
            raise StagingError("Could not store thumbnail") from e

        previous = self._local_path(video.thumbnail_url)
        thumbnail_url = f"{self.settings.PUBLIC_BASE_URL}/assets/{filename}"
        video = self.repo.update(video, thumbnail_url=thumbnail_url, updated_at=utcnow())

        # changement d'extension (png -> jpeg) : l'ancien fichier ne sert plus
        if previous is not None and previous != path:
            try:
                await asyncio.to_thread(previous.unlink, missing_ok=True)
            except OSError as e:
                logger.warning("could not remove previous thumbnail %s: %s", previous, e)
        return video

    async def read(self, video_id: uuid.UUID) -> Tuple[bytes, str]:
        """Retourne (contenu, type MIME) de la miniature d'une vidéo."""
        video = self.repo.get(video_id)
        if not video:
            raise NotFoundError("Couldn't find video")

        path = self._local_path(video.thumbnail_url)
        if path is None:
            raise NotFoundError("Thumbnail not found")
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            raise NotFoundError("Thumbnail not found")
        return data, MIME_BY_EXTENSION[path.suffix.lstrip(".")]

    def _local_path(self, thumbnail_url: Optional[str]) -> Optional[Path]:
        if not thumbnail_url:
            return None
        filename = PurePosixPath(urlparse(thumbnail_url).path).name
        if filename.rpartition(".")[2] not in MIME_BY_EXTENSION:
            return None
        return Path(self.settings.ASSETS_ROOT) / filename
