"""
➡️ But : Gérer le cycle de vie des fichiers temporaires du pipeline vidéo.

stage() : écrit un flux d'upload par morceaux dans ASSETS_ROOT sous un nom aléatoire.

release() : supprime un fichier ; idempotent (fichier absent = simple log).

scope() : context manager async ; tout fichier écrit ou réservé via le scope
est supprimé à la sortie, que l'appel réussisse, échoue ou soit annulé.

    async with staging.scope() as scope:
        staged = await scope.stage(upload, extension="mp4", max_bytes=...)
        processed = scope.reserve(staged.path.with_name(...))
        ...
    # ici, plus aucun fichier temporaire
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, BinaryIO, List, Optional, Protocol

from tubely.core.errors import StagingError, ValidationError
from tubely.utils.media_files import random_name

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1 << 20  # 1 MiB


class ByteSource(Protocol):
    """Tout objet avec `await read(size)` (ex: starlette UploadFile)."""

    async def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True)
class StagedFile:
    path: Path
    name: str  # nom aléatoire, sans extension


class LocalStagingArea:
    def __init__(self, root: Path, *, chunk_size: int = CHUNK_SIZE):
        self.root = Path(root)
        self.chunk_size = chunk_size

    async def stage(
        self,
        source: ByteSource,
        *,
        extension: str,
        max_bytes: Optional[int] = None,
    ) -> StagedFile:
        name = random_name()
        staged = StagedFile(path=self.root / f"{name}.{extension}", name=name)
        written = 0
        try:
            fh = await asyncio.to_thread(_create_file, staged.path)
            try:
                while True:
                    chunk = await source.read(self.chunk_size)
                    if not chunk:
                        break
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        raise ValidationError("File Too Big")
                    await asyncio.to_thread(fh.write, chunk)
            finally:
                await asyncio.shield(asyncio.to_thread(fh.close))
        except OSError as e:
            await self.release(staged)
            logger.error("could not stage %s: %s", staged.path, e)
            raise StagingError() from e
        except BaseException:
            await self.release(staged)
            raise

        logger.debug("staged %s (%s bytes)", staged.path, written)
        return staged

    async def release(self, staged: StagedFile) -> None:
        # shield : une seconde annulation n'interrompt pas la suppression
        try:
            await asyncio.shield(asyncio.to_thread(_remove_file, staged.path))
        except FileNotFoundError:
            logger.debug("release: %s already gone", staged.path)
        except OSError as e:
            # ne masque jamais l'erreur d'origine du pipeline
            logger.warning("could not remove %s: %s", staged.path, e)
        else:
            logger.debug("released %s", staged.path)

    @asynccontextmanager
    async def scope(self) -> AsyncIterator["StagingScope"]:
        scope = StagingScope(self)
        try:
            yield scope
        finally:
            await scope.release_all()


class StagingScope:
    """Fichiers détenus par une seule invocation du pipeline."""

    def __init__(self, area: LocalStagingArea):
        self.area = area
        self.files: List[StagedFile] = []

    async def stage(self, source: ByteSource, **kwargs) -> StagedFile:
        staged = await self.area.stage(source, **kwargs)
        self.files.append(staged)
        return staged

    def reserve(self, path: Path) -> StagedFile:
        """Enregistre un chemin dérivé avant qu'un outil ne l'écrive."""
        staged = StagedFile(path=path, name=path.name)
        self.files.append(staged)
        return staged

    async def release_all(self) -> None:
        while self.files:
            await self.area.release(self.files.pop())


# Appels disque bloquants, exécutés via asyncio.to_thread

def _create_file(path: Path) -> BinaryIO:
    path.parent.mkdir(parents=True, exist_ok=True)
    # "xb" : jamais d'écrasement d'un fichier d'un autre upload
    return open(path, "xb")


def _remove_file(path: Path) -> None:
    path.unlink()
