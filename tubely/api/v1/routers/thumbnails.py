from contextlib import aclosing
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from tubely.api.v1.dependencies import (
    get_auth_service,
    get_access_token_from_bearer,
    get_thumbnail_service,
)
from tubely.api.v1.uploads import FormUpload
from tubely.features.authentication.services import AuthService
from tubely.features.media.thumbnails import ThumbnailService
from tubely.features.videos.schemas import VideoOut
from tubely.features.videos.services import parse_video_id

router = APIRouter(
    prefix="/thumbnails",
    tags=["thumbnails"],
    responses={404: {"description": "Not Found"}},
)


@router.post(
    "/{video_id}",
    summary="Uploader la miniature d'une vidéo",
    description="Multipart, champ `thumbnail` (image/jpeg ou image/png, 10 MiB max).",
    response_model=VideoOut,
)
async def upload_thumbnail(
    request: Request,
    video_id: str,
    access_token: Optional[str] = Depends(get_access_token_from_bearer),
    auth_svc: AuthService = Depends(get_auth_service),
    thumb_svc: ThumbnailService = Depends(get_thumbnail_service),
):
    vid = parse_video_id(video_id)
    user = auth_svc.get_current_user(access_token=access_token)
    max_bytes = thumb_svc.settings.MAX_THUMBNAIL_UPLOAD_BYTES
    async with aclosing(FormUpload(request, "thumbnail", max_bytes=max_bytes)) as upload:
        return await thumb_svc.upload(video_id=vid, user_id=user.id, load_upload=upload.load)


@router.get(
    "/{video_id}",
    summary="Obtenir la miniature d'une vidéo",
    response_class=Response,
)
async def get_thumbnail(
    video_id: str,
    thumb_svc: ThumbnailService = Depends(get_thumbnail_service),
):
    data, media_type = await thumb_svc.read(parse_video_id(video_id))
    return Response(content=data, media_type=media_type, headers={"Cache-Control": "no-store"})
