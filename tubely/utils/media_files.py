import secrets
from typing import Dict, Optional

import filetype


# Extension de fichier par type MIME accepté
EXTENSIONS: Dict[str, str] = {
    "video/mp4": "mp4",
    "image/jpeg": "jpeg",
    "image/png": "png",
}

MIME_BY_EXTENSION: Dict[str, str] = {ext: mime for mime, ext in EXTENSIONS.items()}


def random_name() -> str:
    """
    Nom de fichier/objet aléatoire : 32 octets issus de `secrets`, encodés base64 URL-safe.
    Ne porte aucun sens et n'est jamais réutilisé d'un upload à l'autre.
    """
    return secrets.token_urlsafe(32)


def extension_for(mime: str) -> str:
    """Extension sans le point (mp4, png...). Lève KeyError pour un type non géré."""
    return EXTENSIONS[mime]


def sniff_mime(head: bytes) -> Optional[str]:
    """
    Détecte le type réel via 'filetype' (quelques Ko d'en-tête suffisent).
    Retourne None si le contenu n'est pas reconnu.
    """
    kind = filetype.guess(head)
    return kind.mime if kind else None
