"""
➡️ But : Propriétés communes de toutes les tables (horodatage).

Chaque table déclare sa propre clé primaire : entier pour les users,
UUID opaque pour les vidéos.

Les horodatages sont toujours en UTC avec fuseau (DateTime(timezone=True)).
SQLite ne conserve pas le fuseau : une valeur relue peut revenir naïve,
`as_utc()` la ramène en UTC avant toute comparaison.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def TimestampField(**kwargs):
    """Colonne DateTime avec fuseau ; une colonne distincte par table."""
    return Field(sa_type=DateTime(timezone=True), **kwargs)


class BaseModelDB(SQLModel, table=False):
    created_at: datetime = TimestampField(default_factory=utcnow)
    updated_at: datetime = TimestampField(default_factory=utcnow)
