"""Auth Service - registration, login and the OTP password-reset flow"""
import logging
from typing import Dict
from urllib.parse import quote

from services.errors import (
    DuplicateEmail,
    EmailNotFound,
    InvalidCredentials,
    InvalidOrExpiredCode,
    MailDeliveryError,
    SessionExpired,
    UserNotFound,
    ValidationError,
    WeakPassword,
)
from services.otp_ledger import OTPLedger
from services.user_store import UserStore
from utils.password_rules import validate_password

logger = logging.getLogger(__name__)

REGISTER_REDIRECT = "/index.html"
HOME_REDIRECT = "/home.html"


class AuthService:
    def __init__(self, user_store: UserStore, otp_ledger: OTPLedger, mailer):
        self.user_store = user_store
        self.otp_ledger = otp_ledger
        # anything with send_otp_email(to_email, otp) -> bool
        self.mailer = mailer

    def register(self, username: str, email: str, password: str, confirm_password: str) -> Dict:
        if password != confirm_password:
            raise ValidationError("Passwords do not match")
        if self.user_store.find_by_email(email):
            raise DuplicateEmail()
        user = self.user_store.append({"username": username, "email": email, "password": password})
        logger.info(f"Registered user id={user['id']} username={username}")
        return {"success": True, "redirectUrl": REGISTER_REDIRECT}

    def login(self, username: str, password: str) -> Dict:
        user = self.user_store.find_by_credentials(username, password)
        if not user:
            logger.info(f"Failed login for username={username}")
            raise InvalidCredentials()
        # same escaping as the browser's encodeURIComponent
        user_param = quote(username, safe="!~*'()")
        return {"success": True, "redirectUrl": f"{HOME_REDIRECT}?user={user_param}"}

    def request_reset(self, email: str) -> Dict:
        """
        Issue a reset code and mail it to the account owner

        The code stays valid even when delivery fails.
        """
        if not self.user_store.find_by_email(email):
            raise EmailNotFound()
        otp = self.otp_ledger.issue(email)
        logger.info(f"Issued reset code for {email}")
        if not self.mailer.send_otp_email(email, otp):
            raise MailDeliveryError()
        return {"success": True, "message": "OTP sent"}

    def verify_reset(self, email: str, otp: str) -> Dict:
        if not self.otp_ledger.verify(email, otp):
            raise InvalidOrExpiredCode()
        return {"success": True}

    def complete_reset(self, email: str, otp: str, new_password: str) -> Dict:
        if not self.otp_ledger.verify(email, otp):
            raise SessionExpired()
        check = validate_password(new_password)
        if not check["valid"]:
            raise WeakPassword(check["violations"])
        if not self.user_store.update_password(email, new_password):
            raise UserNotFound()
        self.otp_ledger.consume(email)
        logger.info(f"Password reset completed for {email}")
        return {"success": True}
