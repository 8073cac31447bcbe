"""
➡️ But : Taxonomie des erreurs de l'API.

Chaque erreur est une HTTPException qui porte déjà son code HTTP :
FastAPI la rend telle quelle ({"detail": "..."}), sans handler dédié.

- 400 ValidationError      : id invalide, fichier manquant / trop gros / mauvais type
- 401 AuthenticationError  : token absent, invalide ou expiré
- 403 AuthorizationError   : l'appelant n'est pas propriétaire de la vidéo
- 404 NotFoundError        : enregistrement introuvable
- 409 ConflictError        : doublon (ex: email déjà utilisé)
- 500 ExternalToolError / ProbeError / TranscodeError / PublishError / StagingError

Le stderr des outils externes reste sur l'exception (`.stderr`) pour les logs :
il n'est jamais renvoyé au client.
"""

from typing import Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal Server Error"

    def __init__(self, detail: Optional[str] = None, *, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.http_status,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(AppError):
    http_status = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad Request"


class AuthenticationError(AppError):
    http_status = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(AppError):
    http_status = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFoundError(AppError):
    http_status = status.HTTP_404_NOT_FOUND
    default_detail = "Not Found"


class ConflictError(AppError):
    http_status = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class StagingError(AppError):
    """Échec d'écriture sur le disque local (disque plein, permissions...)."""
    default_detail = "Could not store upload"


class PublishError(AppError):
    """Échec de l'upload vers le stockage objet (réseau, credentials, quota)."""
    default_detail = "Could not publish video"


class ExternalToolError(AppError):
    """Outil externe introuvable, en échec ou dont la sortie est illisible."""
    default_detail = "Video processing failed"

    def __init__(self, detail: Optional[str] = None, *, stderr: str = ""):
        super().__init__(detail)
        self.stderr = stderr


class ProbeError(ExternalToolError):
    default_detail = "Could not read video dimensions"


class TranscodeError(ExternalToolError):
    default_detail = "Could not process video for fast start"
