import pytest

from services.auth_service import AuthService
from services.otp_ledger import OTPLedger
from services.user_store import UserStore


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeMailer:
    """Records reset codes instead of sending them."""

    def __init__(self, ok: bool = True):
        self.ok = ok
        self.sent = []

    def send_otp_email(self, to_email: str, otp: str) -> bool:
        self.sent.append((to_email, otp))
        return self.ok

    def last_code(self, email: str) -> str:
        return [otp for to, otp in self.sent if to == email][-1]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def users_file(tmp_path):
    return str(tmp_path / "users.json")


@pytest.fixture
def user_store(users_file):
    return UserStore(users_file=users_file)


@pytest.fixture
def otp_ledger(clock):
    return OTPLedger(clock=clock)


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def auth_service(user_store, otp_ledger, mailer):
    return AuthService(user_store, otp_ledger, mailer)
