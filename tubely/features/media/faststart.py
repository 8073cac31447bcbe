import logging
from pathlib import Path

from tubely.core.errors import TranscodeError
from tubely.features.media.process import ProcessRunner

logger = logging.getLogger(__name__)

PROCESSED_SUFFIX = ".processed"


class FastStartRewriter:
    """
    Déplace l'atome moov en tête du MP4 (lecture progressive) sans ré-encoder.
    Écrit toujours dans un nouveau fichier : l'entrée n'est jamais modifiée.
    """

    def __init__(self, runner: ProcessRunner, *, ffmpeg_bin: str = "ffmpeg"):
        self.runner = runner
        self.ffmpeg_bin = ffmpeg_bin

    @staticmethod
    def output_path_for(input_path: Path) -> Path:
        return input_path.with_name(input_path.name + PROCESSED_SUFFIX)

    async def rewrite(self, input_path: Path) -> Path:
        output_path = self.output_path_for(input_path)
        result = await self.runner.run(
            self.ffmpeg_bin,
            [
                "-y",
                "-v", "error",
                "-i", str(input_path),
                "-movflags", "faststart",
                "-map_metadata", "0",
                "-codec", "copy",
                "-f", "mp4",
                str(output_path),
            ],
        )
        if result.exit_code != 0:
            logger.error("ffmpeg exited with %s on %s: %s", result.exit_code, input_path.name, result.stderr_text)
            raise TranscodeError(stderr=result.stderr_text)
        return output_path
