"""Email Service for password-reset code delivery.

If SMTP environment variables are not configured, falls back to dev mode and
logs the code instead of sending an email.

Env vars:
  SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, SMTP_FROM, SMTP_TIMEOUT
"""
import os
import smtplib
import logging
from email.message import EmailMessage
from typing import Optional
from jinja2 import Environment, FileSystemLoader, select_autoescape

from services.otp_ledger import OTP_EXP_SECONDS

logger = logging.getLogger(__name__)

template_dir = os.path.join(os.path.dirname(__file__), "email_templates")
env = Environment(loader=FileSystemLoader(template_dir), autoescape=select_autoescape(["html"]))

OTP_SUBJECT = "Your Verification Code"


class EmailService:
    def __init__(self):
        self.host = os.getenv("SMTP_HOST")
        self.port = int(os.getenv("SMTP_PORT", "0") or 0)
        self.user = os.getenv("SMTP_USER")
        self.password = os.getenv("SMTP_PASS")
        self.sender = os.getenv("SMTP_FROM", self.user or "noreply@example.com")
        self.timeout = int(os.getenv("SMTP_TIMEOUT", "15") or 15)

    @property
    def enabled(self) -> bool:
        return all([self.host, self.port, self.user, self.password, self.sender]) and self.port > 0

    def _connect(self) -> smtplib.SMTP:
        # 465 is implicit TLS, everything else upgrades with STARTTLS
        if self.port == 465:
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.port != 465:
                server.starttls()
            server.login(self.user, self.password)
        except Exception:
            server.close()
            raise
        return server

    def render_otp_message(self, to_email: str, otp: str) -> EmailMessage:
        context = {"otp": otp, "minutes": OTP_EXP_SECONDS // 60}
        msg = EmailMessage()
        msg["Subject"] = OTP_SUBJECT
        msg["From"] = self.sender
        msg["To"] = to_email
        msg.set_content(env.get_template("reset_code.txt").render(context))
        msg.add_alternative(env.get_template("reset_code.html").render(context), subtype="html")
        return msg

    def send_otp_email(self, to_email: str, otp: str) -> bool:
        """Deliver a reset code. Returns True when the message was handed off (or logged in dev mode)."""
        if not self.enabled:
            logger.warning(f"Dev mode (no SMTP configured). Reset code for {to_email}: {otp}")
            return True
        msg = self.render_otp_message(to_email, otp)
        try:
            with self._connect() as server:
                server.send_message(msg)
            logger.info(f"Sent reset code email to {to_email}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed sending email to {to_email}: {e}")
            return False

    def test_connection(self) -> Optional[str]:
        """Attempt a lightweight SMTP connection to verify credentials."""
        if not self.enabled:
            return "SMTP not fully configured"
        try:
            with self._connect():
                pass
            return "ok"
        except (smtplib.SMTPException, OSError) as e:
            return f"failed: {e}"
