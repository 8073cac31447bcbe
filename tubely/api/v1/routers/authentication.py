from fastapi import APIRouter, Depends, status

from tubely.api.v1.dependencies import get_auth_service
from tubely.features.authentication.services import AuthService
from tubely.features.authentication.schemas import (
    SignUpIn,
    SignInIn,
    SignInOut,
    AccessTokenOut,
    RefreshIn,
    RevokeIn,
    UserOut,
)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
    responses={404: {"description": "Not Found"}},
)

# -----------------------------
# Sign-up
# -----------------------------
@router.post(
    "/sign-up",
    summary="Créer un compte",
    status_code=status.HTTP_201_CREATED,
    response_model=UserOut,
)
def sign_up(payload: SignUpIn, svc: AuthService = Depends(get_auth_service)):
    return svc.sign_up(payload)

# -----------------------------
# Sign-in
# -----------------------------
@router.post(
    "/sign-in",
    summary="Se connecter",
    description="Retourne l'utilisateur, un access token JWT et un refresh token opaque.",
    response_model=SignInOut,
)
def sign_in(payload: SignInIn, svc: AuthService = Depends(get_auth_service)):
    return svc.sign_in(payload)

# -----------------------------
# Refresh
# -----------------------------
@router.post(
    "/refresh",
    summary="Obtenir un nouvel access token",
    response_model=AccessTokenOut,
)
def refresh(payload: RefreshIn, svc: AuthService = Depends(get_auth_service)):
    return svc.refresh(payload)

# -----------------------------
# Revoke
# -----------------------------
@router.post(
    "/revoke",
    summary="Révoquer un refresh token",
    status_code=status.HTTP_204_NO_CONTENT,
)
def revoke(payload: RevokeIn, svc: AuthService = Depends(get_auth_service)):
    svc.revoke(payload)
    return None
