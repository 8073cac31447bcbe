"""Exécution d'outils externes (ffprobe, ffmpeg) sans bloquer la boucle asyncio."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from tubely.core.errors import ExternalToolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    stdout: bytes
    stderr: bytes

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace").strip()


class ProcessRunner:
    """
    Lance un exécutable et capture stdout/stderr/code de sortie.

    N'interprète pas le code de sortie : c'est le rôle de l'appelant.
    `timeout` (secondes) borne l'exécution ; None = pas de limite.
    """

    def __init__(self, *, timeout: Optional[float] = None):
        self.timeout = timeout

    async def run(self, executable: str, args: Sequence[str]) -> ProcessResult:
        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("could not start %s: %s", executable, e)
            raise ExternalToolError(f"Could not start {executable}", stderr=str(e)) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            _kill(process)
            await process.wait()
            logger.error("%s timed out after %ss", executable, self.timeout)
            raise ExternalToolError(f"{executable} timed out")
        except asyncio.CancelledError:
            # requête abandonnée : l'outil est tué et réclamé avant le nettoyage des fichiers
            _kill(process)
            await asyncio.shield(process.wait())
            raise

        return ProcessResult(exit_code=process.returncode, stdout=stdout, stderr=stderr)


def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass
