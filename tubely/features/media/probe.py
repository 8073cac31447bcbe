import json
import logging
from enum import Enum
from pathlib import Path

from tubely.core.errors import ProbeError
from tubely.features.media.process import ProcessRunner

logger = logging.getLogger(__name__)


class Orientation(str, Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    OTHER = "other"


def classify_orientation(width: int, height: int) -> Orientation:
    """
    Classe un ratio largeur/hauteur, premier intervalle (ouvert) qui correspond :
      1.7 < r < 1.8 -> landscape (16:9)
      0.5 < r < 0.6 -> portrait (9:16)
      sinon         -> other
    """
    ratio = width / height
    if 1.7 < ratio < 1.8:
        return Orientation.LANDSCAPE
    if 0.5 < ratio < 0.6:
        return Orientation.PORTRAIT
    return Orientation.OTHER


class AspectRatioProber:
    """Lit largeur/hauteur du premier flux vidéo via ffprobe (sortie JSON)."""

    def __init__(self, runner: ProcessRunner, *, ffprobe_bin: str = "ffprobe"):
        self.runner = runner
        self.ffprobe_bin = ffprobe_bin

    async def probe(self, path: Path) -> Orientation:
        result = await self.runner.run(
            self.ffprobe_bin,
            [
                "-v", "error",
                "-select_streams", "v:0",
                "-show_entries", "stream=width,height",
                "-of", "json",
                str(path),
            ],
        )
        if result.exit_code != 0:
            logger.error("ffprobe exited with %s on %s: %s", result.exit_code, path.name, result.stderr_text)
            raise ProbeError(stderr=result.stderr_text)

        width, height = _parse_dimensions(result.stdout, result.stderr_text)
        orientation = classify_orientation(width, height)
        logger.info("probed %s: %sx%s -> %s", path.name, width, height, orientation.value)
        return orientation


def _parse_dimensions(stdout: bytes, stderr: str):
    try:
        streams = json.loads(stdout)["streams"]
        width = int(streams[0]["width"])
        height = int(streams[0]["height"])
    except (ValueError, KeyError, IndexError, TypeError) as e:
        logger.error("unreadable ffprobe output: %s", e)
        raise ProbeError("Could not read video dimensions", stderr=stderr) from e
    if width <= 0 or height <= 0:
        raise ProbeError("Invalid video dimensions", stderr=stderr)
    return width, height
