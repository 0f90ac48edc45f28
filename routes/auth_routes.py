"""Account routes: registration, login and forgot-password flow"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from threading import Lock
from typing import Optional
from services.auth_service import AuthService
from services.email_service import EmailService
from services.otp_ledger import OTPLedger
from services.user_store import UserStore

router = APIRouter()
email_service = EmailService()
_auth_service: Optional[AuthService] = None
_auth_service_lock = Lock()


def get_auth_service() -> AuthService:
    # one service (and one OTP ledger) per process; the store file is opened on first request
    global _auth_service
    with _auth_service_lock:
        if _auth_service is None:
            _auth_service = AuthService(UserStore(), OTPLedger(), email_service)
    return _auth_service


def get_email_service() -> EmailService:
    return email_service


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    email: str
    password: str
    confirm_password: str = Field(alias="confirmPassword")


class LoginRequest(BaseModel):
    username: str
    password: str


class ResetRequest(BaseModel):
    email: str


class ResetVerifyRequest(BaseModel):
    email: str
    otp: str


class ResetCompleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    otp: str
    new_password: str = Field(alias="newPassword")


@router.post("/register")
def register(data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    return service.register(data.username, data.email, data.password, data.confirm_password)


@router.post("/login")
def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return service.login(data.username, data.password)


@router.post("/forgot-password/request")
def forgot_password_request(data: ResetRequest, service: AuthService = Depends(get_auth_service)):
    return service.request_reset(data.email)


@router.post("/forgot-password/verify")
def forgot_password_verify(data: ResetVerifyRequest, service: AuthService = Depends(get_auth_service)):
    return service.verify_reset(data.email, data.otp)


@router.post("/forgot-password/reset")
def forgot_password_reset(data: ResetCompleteRequest, service: AuthService = Depends(get_auth_service)):
    return service.complete_reset(data.email, data.otp, data.new_password)


@router.get("/email/status")
def email_status(mailer: EmailService = Depends(get_email_service)):
    """Check SMTP configuration & connectivity."""
    return {"enabled": mailer.enabled, "connection": mailer.test_connection()}
