"""Authentication API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cartmate.api.dependencies import get_current_user
from cartmate.database import get_db
from cartmate.models.user import User
from cartmate.schemas.auth import AuthResponse, OAuthLogin, UserResponse
from cartmate.services.auth import (
    AccountConflictError,
    UserProvisioningError,
    create_access_token,
    get_or_create_external_user,
)
from cartmate.services.oauth import SUPPORTED_PROVIDERS, OAuthError, OAuthService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def get_oauth_service() -> OAuthService:
    """Get OAuth service instance."""
    return OAuthService()


@router.post("/oauth/{provider}", response_model=AuthResponse)
async def oauth_login(
    provider: str,
    login: OAuthLogin,
    db: Annotated[Session, Depends(get_db)],
    oauth_service: Annotated[OAuthService, Depends(get_oauth_service)],
):
    """Exchange a provider access token for an application token."""
    if provider not in SUPPORTED_PROVIDERS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unsupported provider: {provider}",
        )

    try:
        identity = await oauth_service.fetch_identity(provider, login.access_token)
    except OAuthError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    try:
        user = get_or_create_external_user(
            db,
            provider=identity.provider,
            external_user_id=identity.external_user_id,
            email=identity.email,
            name=identity.name,
            profile_picture_url=identity.profile_picture_url,
        )
    except AccountConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except UserProvisioningError as e:
        logger.error(f"User provisioning failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not sign in right now, please retry",
        ) from e

    access_token = create_access_token(user.id, user.email, user.name)

    return AuthResponse(
        access_token=access_token,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user


@router.post("/logout")
async def logout(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Logout (client should discard token)."""
    return {"message": "Logged out successfully"}
