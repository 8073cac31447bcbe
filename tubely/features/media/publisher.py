import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Callable

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from tubely.core.config import Settings
from tubely.core.errors import PublishError
from tubely.features.media.probe import Orientation
from tubely.utils.s3 import make_s3_client, public_object_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedLocation:
    key: str
    url: str


def build_video_key(orientation: Orientation, name: str, extension: str) -> str:
    """videos/{orientation}/{name}.{ext} : l'orientation sert de préfixe aux traitements batch."""
    return f"videos/{orientation.value}/{name}.{extension}"


class ObjectPublisher:
    """
    Upload d'un fichier local vers S3 puis construction de son URL publique.
    Pas de retry : un échec remonte en PublishError.
    """

    def __init__(
        self,
        *,
        bucket: str,
        url_for: Callable[[str], str],
        s3_client_factory: Callable[[], object],
    ):
        self.bucket = bucket
        self.url_for = url_for
        self._s3_factory = s3_client_factory

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectPublisher":
        return cls(
            bucket=settings.S3_BUCKET,
            url_for=partial(public_object_url, settings),
            s3_client_factory=partial(make_s3_client, settings),
        )

    async def publish(self, local_path: Path, key: str, media_type: str) -> PublishedLocation:
        s3 = self._s3_factory()
        try:
            # boto3 est bloquant : upload dans un thread
            await asyncio.to_thread(
                s3.upload_file,
                Filename=str(local_path),
                Bucket=self.bucket,
                Key=key,
                ExtraArgs={"ContentType": media_type},
            )
        except (BotoCoreError, ClientError, S3UploadFailedError) as e:
            logger.error("upload of %s to s3://%s/%s failed: %s", local_path.name, self.bucket, key, e)
            raise PublishError() from e

        location = PublishedLocation(key=key, url=self.url_for(key))
        logger.info("published s3://%s/%s", self.bucket, key)
        return location
