from sqlmodel import Field
from typing import Optional
from datetime import datetime

from .base import BaseModelDB, TimestampField


class RefreshToken(BaseModelDB, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    token: str = Field(index=True, unique=True)
    user_id: int = Field(index=True, foreign_key="user.id")
    expires_at: datetime = TimestampField()
    revoked_at: Optional[datetime] = TimestampField(default=None)
