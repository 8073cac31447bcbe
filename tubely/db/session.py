"""
➡️ But : Configurer la base (SQLite par défaut) et gérer les sessions de base de données.

engine : connexion à la base définie par settings.DATABASE_URL.

init_db() : crée les tables à partir des modèles SQLModel.

get_session() : dépendance FastAPI qui ouvre une session, la fournit aux routes, puis la ferme proprement.
"""

from typing import Dict, Any
from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.engine import Engine

# Import all models for creating all tables
from tubely.db.models.users import User  # noqa: F401
from tubely.db.models.videos import Video  # noqa: F401
from tubely.db.models.refresh_tokens import RefreshToken  # noqa: F401

from tubely.core.config import settings


def _build_engine() -> Engine:
    url = settings.DATABASE_URL
    assert url, "DATABASE_URL must be set"

    is_sqlite = url.startswith("sqlite:")

    connect_args: Dict[str, Any] = {}
    if is_sqlite:
        # Requis pour SQLite quand utilisé dans un app serveur (multi-threads)
        connect_args["check_same_thread"] = False

    return create_engine(
        url,
        echo=False,
        connect_args=connect_args,
        pool_pre_ping=not is_sqlite,
    )


engine: Engine = _build_engine()


def init_db(bind: Engine = engine) -> None:
    """
    Crée les tables si elles n'existent pas (usage dev/demo).
    En prod, préfère des migrations.
    """
    SQLModel.metadata.create_all(bind)


def get_session():
    """
    Dépendance FastAPI : fournit une session par requête.
    """
    with Session(engine) as session:
        yield session
