import uuid
from typing import Optional

from sqlmodel import Field
from sqlalchemy import Column, ForeignKey, Integer

from .base import BaseModelDB


class Video(BaseModelDB, table=True):
    """Vidéo d'un utilisateur ; `video_url` n'est renseignée qu'après une publication réussie."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(description="Titre de la vidéo")
    description: str = Field(default="", description="Description libre")
    video_url: Optional[str] = Field(default=None, description="URL publique (CloudFront ou S3)")
    thumbnail_url: Optional[str] = Field(default=None, description="URL publique de la miniature")

    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        description="Propriétaire de la vidéo",
    )
