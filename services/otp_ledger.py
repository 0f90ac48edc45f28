"""OTP Ledger - one outstanding password-reset code per email, kept in memory only"""
import time
import secrets
from threading import Lock
from typing import Callable, Dict

OTP_EXP_SECONDS = 300  # 5 minutes


class OTPLedger:
    def __init__(self, ttl_seconds: int = OTP_EXP_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = Lock()
        self.store: Dict[str, Dict] = {}

    def issue(self, email: str) -> str:
        """Create a new 6-digit code for email, replacing any earlier one."""
        otp = str(secrets.randbelow(900000) + 100000)
        with self._lock:
            self.store[email] = {"otp": otp, "expires": self._clock() + self.ttl_seconds}
        return otp

    def verify(self, email: str, otp: str) -> bool:
        """True while the code matches and has not expired. Never removes the entry."""
        with self._lock:
            data = self.store.get(email)
        if not data:
            return False
        return data["otp"] == otp and self._clock() < data["expires"]

    def consume(self, email: str):
        with self._lock:
            self.store.pop(email, None)
