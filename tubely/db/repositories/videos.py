from typing import Sequence
from sqlmodel import select

from tubely.db.repositories.base import BaseRepository
from tubely.db.models.videos import Video


class VideoRepository(BaseRepository[Video]):
    """CRUD Vidéos + requêtes spécifiques."""
    model = Video

    def list_for_user(self, user_id: int) -> Sequence[Video]:
        return self.session.exec(
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc())
        ).all()
