import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class VideoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200, examples=["Boots of Speed"])
    description: str = Field("", max_length=5000)


class VideoOut(BaseModel):
    id: uuid.UUID
    user_id: int
    title: str
    description: str
    video_url: Optional[str]
    thumbnail_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
