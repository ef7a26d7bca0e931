"""
User/auth API endpoints: /api/v1/user/*
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from core import env

from . import dependencies, schemas, security, service

router = APIRouter(prefix="/api/v1/user")


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=security.AUTH_COOKIE_NAME,
        value=token,
        max_age=security.token_max_age_s(),
        httponly=True,
        secure=env.env_bool("COOKIE_SECURE", False),
        samesite="lax",
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    response: Response,
    full_name: str = Form(..., min_length=schemas.FULL_NAME_MIN, max_length=schemas.FULL_NAME_MAX),
    email: str = Form(..., min_length=3, max_length=320),
    password: str = Form(..., min_length=schemas.PASSWORD_MIN, max_length=schemas.PASSWORD_MAX),
    avatar: UploadFile | None = File(default=None),
) -> dict:
    result = await service.register(full_name=full_name, email=email, password=password, avatar=avatar)
    _set_auth_cookie(response, result.token)
    return {"success": True, "message": "User registered successfully.", "user": result.user}


@router.post("/login")
async def login(payload: schemas.LoginRequest, response: Response) -> dict:
    result = await service.login(payload)
    _set_auth_cookie(response, result.token)
    return {"success": True, "message": "User logged in successfully.", "user": result.user}


@router.post("/logout")
async def logout(response: Response) -> dict:
    response.delete_cookie(key=security.AUTH_COOKIE_NAME, httponly=True, samesite="lax")
    return {"success": True, "message": "User logged out successfully."}


@router.get("/me")
async def me(current_user: dict = Depends(dependencies.get_current_user)) -> dict:
    return {"success": True, "message": "User details.", "user": service.to_user_response(current_user)}


@router.post("/reset")
async def forgot_password(payload: schemas.ForgotPasswordRequest) -> dict:
    sent_to = await service.forgot_password(payload)
    return {"success": True, "message": f"Reset password link has been sent to {sent_to}."}


@router.post("/reset/{reset_token}")
async def reset_password(reset_token: str, payload: schemas.ResetPasswordRequest) -> dict:
    await service.reset_password(reset_token, payload)
    return {"success": True, "message": "Password changed successfully."}


@router.post("/change-password")
async def change_password(
    payload: schemas.ChangePasswordRequest,
    current_user: dict = Depends(dependencies.get_current_user),
) -> dict:
    await service.change_password(current_user, payload)
    return {"success": True, "message": "Password changed successfully."}


@router.put("/update/{user_id}")
async def update_user(
    user_id: int,
    full_name: str | None = Form(default=None, min_length=schemas.FULL_NAME_MIN, max_length=schemas.FULL_NAME_MAX),
    avatar: UploadFile | None = File(default=None),
    current_user: dict = Depends(dependencies.get_current_user),
) -> dict:
    user = await service.update_user(current_user, user_id, full_name=full_name, avatar=avatar)
    return {"success": True, "message": "User details updated successfully.", "user": user}
