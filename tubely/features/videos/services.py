import logging
import uuid
from typing import Optional, Sequence

from tubely.core.errors import AuthorizationError, NotFoundError, ValidationError
from tubely.db.models.videos import Video
from tubely.db.repositories.videos import VideoRepository
from tubely.features.videos.schemas import VideoCreate

logger = logging.getLogger(__name__)


def parse_video_id(raw: Optional[str]) -> uuid.UUID:
    """Premier contrôle de toutes les routes /videos/{video_id} : id présent et UUID valide."""
    if not raw:
        raise ValidationError("Invalid video ID")
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise ValidationError("Invalid video ID")


def get_owned_video(repo: VideoRepository, video_id: uuid.UUID, user_id: int) -> Video:
    """Existence puis propriété, dans cet ordre (404 avant 403)."""
    video = repo.get(video_id)
    if not video:
        raise NotFoundError("Couldn't find video")
    if video.user_id != user_id:
        raise AuthorizationError("You don't own this video")
    return video


class VideoService:
    def __init__(self, repo: VideoRepository):
        self.repo = repo

    def create(self, payload: VideoCreate, *, user_id: int) -> Video:
        video = self.repo.create(
            title=payload.title,
            description=payload.description,
            user_id=user_id,
        )
        logger.info("video %s created by user %s", video.id, user_id)
        return video

    def list_for_user(self, user_id: int) -> Sequence[Video]:
        return self.repo.list_for_user(user_id)

    def get(self, video_id: uuid.UUID, *, user_id: int) -> Video:
        return get_owned_video(self.repo, video_id, user_id)

    def delete(self, video_id: uuid.UUID, *, user_id: int) -> None:
        video = get_owned_video(self.repo, video_id, user_id)
        self.repo.delete(video)
        logger.info("video %s deleted by user %s", video_id, user_id)
