from typing import Optional

from sqlmodel import Field

from .base import BaseModelDB


class User(BaseModelDB, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    hashed_password: str
