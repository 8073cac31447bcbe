from typing import Optional

from fastapi import Request
from starlette.datastructures import FormData, UploadFile

from tubely.core.errors import ValidationError
from tubely.features.media.pipeline import UploadRequest

# En-têtes multipart (boundary, Content-Disposition...) autour du fichier
MULTIPART_OVERHEAD = 64 << 10


class FormUpload:
    """
    Lecture différée d'un champ fichier multipart.

    Le corps n'est parsé qu'à l'appel de `load()` (donc après les contrôles
    de propriété faits par les services) ; `aclose()` libère les fichiers
    temporaires de starlette.

    Si `max_bytes` est fourni, un Content-Length trop grand est refusé
    avant toute lecture du corps : starlette écrirait sinon le fichier
    entier sur disque pendant le parsing.
    """

    def __init__(self, request: Request, field: str, *, max_bytes: Optional[int] = None):
        self.request = request
        self.field = field
        self.max_bytes = max_bytes
        self._form: Optional[FormData] = None

    async def load(self) -> Optional[UploadRequest]:
        self._check_content_length()
        self._form = await self.request.form(max_files=1)
        value = self._form.get(self.field)
        if not isinstance(value, UploadFile):
            return None
        return UploadRequest(media_type=value.content_type, size=value.size, source=value)

    def _check_content_length(self) -> None:
        if self.max_bytes is None:
            return
        try:
            length = int(self.request.headers.get("content-length", ""))
        except ValueError:
            return  # chunked : le compteur du staging reste le garde-fou
        if length > self.max_bytes + MULTIPART_OVERHEAD:
            raise ValidationError("File Too Big")

    async def aclose(self) -> None:
        if self._form is not None:
            await self._form.close()
