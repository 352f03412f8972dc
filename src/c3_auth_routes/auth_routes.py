"""Authentication and profile routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from src.auth import CurrentUser, get_admin_user, get_current_user, login_rate_limit
from src.c2_auth_service import AuthService, OAuthService
from src.core.http_errors import http_error

logger = logging.getLogger(__name__)


# Request Models
class LoginRequest(BaseModel):
    email: Optional[str] = Field(None, description="Account e-mail")
    password: Optional[str] = Field(None, description="Account password")


class GoogleLoginRequest(BaseModel):
    access_token: Optional[str] = Field(None, description="Google OAuth access token")


class GitHubLoginRequest(BaseModel):
    code: Optional[str] = Field(None, description="GitHub OAuth authorization code")


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = Field(None, description="E-mail of the account to recover")


class ResetPasswordRequest(BaseModel):
    token: Optional[str] = Field(None, description="Reset token from the recovery link")
    new_password: Optional[str] = Field(None, description="New password")


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = Field(None, description="Display name")


class UpdateAvatarRequest(BaseModel):
    avatar: Optional[str] = Field(None, description="Avatar image URL")


class ChangePasswordRequest(BaseModel):
    current_password: Optional[str] = Field(None, description="Current password (not needed for OAuth-only accounts)")
    new_password: Optional[str] = Field(None, description="New password")


class CreateUserRequest(BaseModel):
    email: Optional[str] = Field(None, description="E-mail of the new account")
    password: Optional[str] = Field(None, description="Initial password")
    name: Optional[str] = Field(None, description="Display name")
    role: Optional[str] = Field(None, description="user or admin")


def create_auth_router():
    """Create the authentication router.

    The same router is mounted under ``/api/auth`` and directly under ``/api``.

    Returns:
        APIRouter: Configured router with login, OAuth, recovery and profile endpoints
    """
    router = APIRouter(tags=["auth"])

    @router.post("/login", dependencies=[Depends(login_rate_limit)])
    async def login(request: LoginRequest):
        """Log in with e-mail and password."""
        try:
            return await AuthService.login(request.email, request.password)
        except Exception as e:
            raise http_error(e, "log in")

    @router.post("/oauth/google", dependencies=[Depends(login_rate_limit)])
    async def google_login(request: GoogleLoginRequest):
        """Log in with a Google access token."""
        try:
            return await OAuthService.google_login(request.access_token)
        except Exception as e:
            raise http_error(e, "authenticate with Google")

    @router.post("/oauth/github", dependencies=[Depends(login_rate_limit)])
    async def github_login(request: GitHubLoginRequest):
        """Log in with a GitHub authorization code."""
        try:
            return await OAuthService.github_login(request.code)
        except Exception as e:
            raise http_error(e, "authenticate with GitHub")

    @router.post("/forgot-password", dependencies=[Depends(login_rate_limit)])
    async def forgot_password(request: ForgotPasswordRequest):
        try:
            return await AuthService.forgot_password(request.email)
        except Exception as e:
            raise http_error(e, "start password recovery")

    @router.post("/reset-password", dependencies=[Depends(login_rate_limit)])
    async def reset_password(request: ResetPasswordRequest):
        try:
            return await AuthService.reset_password(request.token, request.new_password)
        except Exception as e:
            raise http_error(e, "reset password")

    @router.post("/register", dependencies=[Depends(login_rate_limit)])
    async def register():
        """Public sign-up is disabled; accounts are created by administrators."""
        try:
            await AuthService.register()
        except Exception as e:
            raise http_error(e, "register")

    @router.get("/me")
    async def get_me(current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await AuthService.get_me(current_user.id)
        except Exception as e:
            raise http_error(e, "load profile")

    @router.put("/profile")
    async def update_profile(request: UpdateProfileRequest, current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await AuthService.update_profile(current_user.id, request.name)
        except Exception as e:
            raise http_error(e, "update profile")

    @router.put("/avatar")
    async def update_avatar(request: UpdateAvatarRequest, current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await AuthService.update_avatar(current_user.id, request.avatar)
        except Exception as e:
            raise http_error(e, "update avatar")

    @router.post("/avatar/upload")
    async def upload_avatar(
        avatar: Optional[UploadFile] = File(None),
        current_user: CurrentUser = Depends(get_current_user),
    ):
        """Upload an image file and use it as the avatar."""
        if avatar is None:
            raise HTTPException(status_code=400, detail="No file uploaded")
        try:
            content = await avatar.read()
            return await AuthService.set_avatar_file(current_user.id, content, avatar.content_type, avatar.filename)
        except Exception as e:
            raise http_error(e, "upload avatar")

    @router.put("/password")
    async def change_password(request: ChangePasswordRequest, current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await AuthService.change_password(current_user.id, request.current_password, request.new_password)
        except Exception as e:
            raise http_error(e, "change password")

    @router.post("/admin/create-user", status_code=201)
    async def create_user(request: CreateUserRequest, admin: CurrentUser = Depends(get_admin_user)):
        """Create an account (administrators only)."""
        logger.info(f"Admin {admin.id} creating account for {request.email}")
        try:
            return await AuthService.create_user(
                request.email, request.password, name=request.name, role=request.role, created_by=admin.id
            )
        except Exception as e:
            raise http_error(e, "create user")

    return router
