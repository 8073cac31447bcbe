from contextlib import aclosing
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status

from tubely.api.v1.dependencies import (
    get_auth_service,
    get_access_token_from_bearer,
    get_video_service,
    get_ingestion_pipeline,
)
from tubely.api.v1.uploads import FormUpload
from tubely.features.authentication.services import AuthService
from tubely.features.media.pipeline import IngestionPipeline
from tubely.features.videos.schemas import VideoCreate, VideoOut
from tubely.features.videos.services import VideoService, parse_video_id

router = APIRouter(
    prefix="/videos",
    tags=["videos"],
    responses={404: {"description": "Not Found"}},
)

# -----------------------------
# CRUD
# -----------------------------
@router.post(
    "",
    summary="Créer une vidéo (brouillon, sans fichier)",
    status_code=status.HTTP_201_CREATED,
    response_model=VideoOut,
)
def create_video(
    payload: VideoCreate,
    access_token: Optional[str] = Depends(get_access_token_from_bearer),
    auth_svc: AuthService = Depends(get_auth_service),
    video_svc: VideoService = Depends(get_video_service),
):
    user = auth_svc.get_current_user(access_token=access_token)
    return video_svc.create(payload, user_id=user.id)


@router.get(
    "",
    summary="Lister mes vidéos",
    response_model=List[VideoOut],
)
def list_videos(
    access_token: Optional[str] = Depends(get_access_token_from_bearer),
    auth_svc: AuthService = Depends(get_auth_service),
    video_svc: VideoService = Depends(get_video_service),
):
    user = auth_svc.get_current_user(access_token=access_token)
    return video_svc.list_for_user(user.id)


@router.get(
    "/{video_id}",
    summary="Obtenir une vidéo",
    response_model=VideoOut,
)
def get_video(
    video_id: str,
    access_token: Optional[str] = Depends(get_access_token_from_bearer),
    auth_svc: AuthService = Depends(get_auth_service),
    video_svc: VideoService = Depends(get_video_service),
):
    vid = parse_video_id(video_id)
    user = auth_svc.get_current_user(access_token=access_token)
    return video_svc.get(vid, user_id=user.id)


@router.delete(
    "/{video_id}",
    summary="Supprimer une vidéo",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        204: {"description": "Supprimée"},
        401: {"description": "Non authentifié"},
        403: {"description": "Interdit"},
        404: {"description": "Introuvable"},
    },
)
def delete_video(
    video_id: str,
    access_token: Optional[str] = Depends(get_access_token_from_bearer),
    auth_svc: AuthService = Depends(get_auth_service),
    video_svc: VideoService = Depends(get_video_service),
):
    vid = parse_video_id(video_id)
    user = auth_svc.get_current_user(access_token=access_token)
    video_svc.delete(vid, user_id=user.id)
    return None

# -----------------------------
# Upload du fichier vidéo
# -----------------------------
@router.post(
    "/{video_id}/upload",
    summary="Uploader le fichier d'une vidéo (ffprobe → ffmpeg faststart → S3)",
    description=(
        "Multipart, champ `video` (video/mp4, 1 GiB max). "
        "Le fichier est classé par orientation, réécrit pour la lecture progressive "
        "puis publié ; `video_url` est renseignée uniquement en cas de succès."
    ),
    response_model=VideoOut,
    responses={
        400: {"description": "Id, fichier ou type invalide"},
        401: {"description": "Non authentifié"},
        403: {"description": "Interdit"},
        500: {"description": "Échec du traitement ou de la publication"},
    },
)
async def upload_video(
    request: Request,
    video_id: str,
    access_token: Optional[str] = Depends(get_access_token_from_bearer),
    auth_svc: AuthService = Depends(get_auth_service),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
):
    vid = parse_video_id(video_id)
    user = auth_svc.get_current_user(access_token=access_token)
    max_bytes = pipeline.settings.MAX_VIDEO_UPLOAD_BYTES
    async with aclosing(FormUpload(request, "video", max_bytes=max_bytes)) as upload:
        return await pipeline.run(video_id=vid, user_id=user.id, load_upload=upload.load)
