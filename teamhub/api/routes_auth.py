"""
api/routes_auth.py — Registration, OTP verification, login, password reset,
profile and logout.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from ..auth.models import User
from ..config import Settings, get_settings
from ..core.auth_service import AuthService
from ..core.uploads import stored_upload
from .dependencies import get_auth_service, get_current_user
from .dto import (
    EmailRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    VerifyOTPRequest,
)
from .errors import success_response

router = APIRouter()


# ── Registration & verification ───────────────────────────────────────────────

@router.post("/api/auth/register")
async def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    result = auth.register(
        username=body.username.strip(),
        surname=body.surname.strip(),
        email=body.email,
        password=body.password,
        user_role=body.user_role,
        country_code=body.country_code,
        mobile_number=body.mobile_number,
        date_of_birth=body.date_of_birth.isoformat(),
        gender=body.gender.value,
        avatar=body.avatar,
    )
    return success_response(
        "User registered successfully. Please verify your email with the OTP sent.",
        result,
        http_status=201,
    )


@router.post("/api/auth/verify-otp")
async def verify_otp(body: VerifyOTPRequest, auth: AuthService = Depends(get_auth_service)):
    result = auth.verify_otp(body.email, body.otp.strip())
    return success_response("Email verified successfully", result)


@router.post("/api/auth/resend-otp")
async def resend_otp(body: EmailRequest, auth: AuthService = Depends(get_auth_service)):
    auth.resend_otp(body.email)
    return success_response("OTP resent successfully", {"email": body.email.lower()})


# ── Login ─────────────────────────────────────────────────────────────────────

@router.post("/api/auth/login")
async def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    result = auth.login(body.email, body.password, body.role)
    return success_response("Login successful", result)


# ── Password reset ────────────────────────────────────────────────────────────

@router.post("/api/auth/forgot-password")
async def forgot_password(body: EmailRequest, auth: AuthService = Depends(get_auth_service)):
    email = auth.forgot_password(body.email)
    return success_response("Password reset OTP sent to your email", {"email": email})


@router.post("/api/auth/verify-reset-otp")
async def verify_reset_otp(body: VerifyOTPRequest, auth: AuthService = Depends(get_auth_service)):
    auth.verify_password_reset_otp(body.email, body.otp.strip())
    return success_response("OTP verified successfully", {"email": body.email.lower()})


@router.post("/api/auth/reset-password")
async def reset_password(body: ResetPasswordRequest, auth: AuthService = Depends(get_auth_service)):
    result = auth.reset_password(body.email, body.otp.strip(), body.new_password)
    return success_response("Password reset successfully", result)


# ── Profile ───────────────────────────────────────────────────────────────────

@router.get("/api/auth/profile")
async def get_profile(
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    return success_response("Profile fetched successfully", auth.get_profile(user.id))


@router.put("/api/auth/profile")
async def update_profile(
    username: Optional[str] = Form(default=None),
    surname: Optional[str] = Form(default=None),
    country_code: Optional[str] = Form(default=None, alias="countryCode"),
    mobile_number: Optional[str] = Form(default=None, alias="mobileNumber"),
    date_of_birth: Optional[str] = Form(default=None, alias="dateOfBirth"),
    gender: Optional[str] = Form(default=None),
    avatar: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    async with stored_upload(avatar, "avatars", settings.uploads_dir) as avatar_path:
        profile = auth.update_profile(
            user,
            {
                "username": username,
                "surname": surname,
                "country_code": country_code,
                "mobile_number": mobile_number,
                "date_of_birth": date_of_birth,
                "gender": gender,
                "avatar": avatar_path,
            },
        )
    return success_response("Profile updated successfully", profile)


# ── Logout ────────────────────────────────────────────────────────────────────

@router.post("/api/auth/logout")
async def logout(
    request: Request,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    auth.logout(getattr(request.state, "token", None))
    return success_response("Logged out successfully")
