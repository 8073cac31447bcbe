from typing import Optional
from sqlmodel import select

from tubely.db.repositories.base import BaseRepository
from tubely.db.models.base import utcnow
from tubely.db.models.refresh_tokens import RefreshToken


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    model = RefreshToken

    def get_by_token(self, token: str) -> Optional[RefreshToken]:
        return self.session.exec(
            select(self.model).where(self.model.token == token)
        ).first()

    def revoke(self, token: str) -> None:
        record = self.get_by_token(token)
        if not record or record.revoked_at:
            return
        now = utcnow()
        record.revoked_at = now
        record.updated_at = now
        self.session.add(record)
        self.session.commit()
