"""
Auth API routes — signup, login, refresh, me, profile, change-password.

Route prefix: /api/v1/auth
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from auth.dependencies import get_auth_service, get_current_user_id
from auth.models import AuthResult
from auth.service import AuthService

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=1024)
    nickname: str = Field(..., min_length=1, max_length=60)
    invite_code: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=1024)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    nickname: str
    avatar_url: Optional[str] = None
    group_id: Optional[int] = None
    default_currency: Optional[str] = None


class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str
    refresh_token: str


class RefreshTokenResponse(BaseModel):
    access_token: str


class UpdateProfileRequest(BaseModel):
    nickname: str = Field(..., min_length=1, max_length=60)
    email: EmailStr


class MeResponse(BaseModel):
    user: UserResponse


def _auth_response(result: AuthResult) -> Dict[str, Any]:
    return {
        "user": UserResponse.model_validate(result.user),
        "access_token": result.access_token,
        "refresh_token": result.refresh_token,
    }


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    req: SignupRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new user."""
    result = await service.signup(req.email, req.password, req.nickname, req.invite_code)
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    result = await service.login(req.email, req.password)
    return _auth_response(result)


@router.post("/refresh", response_model=RefreshTokenResponse)
async def refresh(
    req: RefreshTokenRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    access_token = await service.refresh(req.refresh_token)
    return {"access_token": access_token}


@router.get("/me", response_model=MeResponse)
async def me(
    user_id: int = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    user = await service.get_user(user_id)
    return {"user": UserResponse.model_validate(user)}


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    req: ChangePasswordRequest,
    user_id: int = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> Response:
    await service.change_password(user_id, req.current_password, req.new_password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/profile", response_model=MeResponse)
async def update_profile(
    req: UpdateProfileRequest,
    user_id: int = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Update nickname and email; 409 if the email belongs to someone else."""
    user = await service.update_profile(user_id, req.nickname, req.email)
    return {"user": UserResponse.model_validate(user)}
